# setup.py
from setuptools import setup, find_packages

setup(
    name="skgraph",
    version="0.1.0",
    description="SK combinator evaluator on a binder/slot pointer graph",
    packages=find_packages(include=["skgraph", "skgraph.*"]),
    package_data={"skgraph": ["prelude/*.lisp"]},
    python_requires=">=3.10",
    install_requires=[],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    entry_points={
        "console_scripts": ["skgraph = skgraph.cli:main"],
    },
    zip_safe=False,
)
