"""
Setuptools build script for the ``llm`` command dispatcher.

This file allows installation of the ``llmcli`` package via
``pip install .``.  It declares the required dependencies and
registers a console script entry point named ``llm``.  When
installed, users can invoke any supported AI assistant CLI through
``llm`` from their shell.

Test dependencies are available through the ``test`` extra:
``pip install -e .[test]``.
"""

from setuptools import setup, find_packages

setup(
    name="llmcli",
    version="0.3.0",
    description="One command for every locally installed AI assistant CLI",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click>=8.0",
        "PyYAML>=5.4",
        "loguru>=0.6",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "llm=llmcli.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
)
