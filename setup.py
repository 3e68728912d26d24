# setup.py
from setuptools import setup, find_packages

setup(
    name="byline",
    version="0.3.0",
    description="Line-by-line file loops with chunked multiprocess execution",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.9",
    install_requires=[
        "tqdm",
        "setproctitle",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["byline=byline.cli:main"],
    },
)
