#!/usr/bin/env python
from setuptools import setup, find_packages

version = "0.1.0"

with open("./README.rst", encoding="utf-8") as f:
    readme = f.read()

setup(
    name="Tornado-Binlog",
    version=version,
    description="Pure Python MySQL replication client for Tornado",
    long_description=readme,
    packages=find_packages(exclude=["tests*", "tornado_binlog.tests*"]),
    python_requires=">=3.7",
    install_requires=[
        "tornado>=5.1",
        "PyMySQL",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.7",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: Implementation :: CPython",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Topic :: Database",
    ],
    keywords="MySQL binlog replication tornado",
)
