#!/usr/bin/env python3
"""
Setup script for the topicnet package.
"""

from setuptools import setup, find_packages
import os

def parse_requirements(filename):
    """Parse a pip requirements file into a list of install_requires."""
    if not os.path.exists(filename):
        return []
    with open(filename, "r") as f:
        lines = f.readlines()
    return [
        line.strip()
        for line in lines
        if line.strip() and not line.strip().startswith("#")
    ]

setup(
    name="topicnet",
    version="1.0.0",
    author="topicnet contributors",
    description="Topic model selection and temporal topic-association networks",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={"topicnet": ["config.yaml"]},
    zip_safe=False,
    install_requires=parse_requirements(os.path.join(os.path.dirname(os.path.abspath(__file__)), "pip_requirements.txt")),
    extras_require={"test": ["pytest>=7.0"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
)
