# tests/test_config.py
from pathlib import Path

import pytest

from byline.config import HeaderMode, ProcessingContext, normalize_files
from byline.errors import InvalidArgumentError


def test_normalize_single_path_forms():
    assert normalize_files("a.txt") == ("a.txt",)
    assert normalize_files(Path("a.txt")) == ("a.txt",)
    assert normalize_files(b"a.txt") == ("a.txt",)
    assert normalize_files(None) == ()


def test_normalize_sequences_keep_order():
    assert normalize_files(["b", Path("a"), "c"]) == ("b", "a", "c")
    assert normalize_files(("x",)) == ("x",)


@pytest.mark.parametrize("bad", [42, [1], ["ok", ""], [None]])
def test_normalize_rejects_bad_entries(bad):
    with pytest.raises(InvalidArgumentError):
        normalize_files(bad)


def test_defaults():
    cfg = ProcessingContext()
    assert cfg.files == ()
    assert cfg.processes == 1
    assert cfg.header_mode is HeaderMode.NONE
    assert cfg.encoding == "utf-8"
    assert not cfg.extended_info


@pytest.mark.parametrize("bad", [0, -1, 2.5, "4", True, None])
def test_processes_validation(bad):
    with pytest.raises(InvalidArgumentError):
        ProcessingContext(processes=bad)


def test_invalid_argument_error_is_value_error():
    with pytest.raises(ValueError):
        ProcessingContext(processes=0)


@pytest.mark.parametrize(
    "value, expected",
    [("none", HeaderMode.NONE), ("first", HeaderMode.FIRST), ("all", HeaderMode.ALL_FILES),
     (HeaderMode.FIRST, HeaderMode.FIRST)],
)
def test_header_mode_accepts_strings(value, expected):
    assert ProcessingContext(header_mode=value).header_mode is expected


def test_header_mode_rejects_unknown():
    with pytest.raises(InvalidArgumentError, match="header_mode"):
        ProcessingContext(header_mode="every")


def test_header_handler_must_be_callable():
    with pytest.raises(InvalidArgumentError):
        ProcessingContext(header_handler="print")


def test_frozen_and_replace_revalidates():
    cfg = ProcessingContext(files="a.txt")
    with pytest.raises(AttributeError):
        cfg.processes = 4  # type: ignore[misc]

    four = cfg.replace(processes=4)
    assert four.processes == 4
    assert cfg.processes == 1
    assert four.files == ("a.txt",)

    with pytest.raises(InvalidArgumentError):
        cfg.replace(processes=0)


def test_require_files():
    with pytest.raises(InvalidArgumentError, match="No file specified"):
        ProcessingContext().require_files()
    assert ProcessingContext(files=["a", "b"]).require_files() == ("a", "b")


def test_header_handler_ignored_in_equality():
    assert ProcessingContext(header_handler=print) == ProcessingContext()
