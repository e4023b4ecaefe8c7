#!/usr/bin/env python3
"""
leftalignpy - 比对中插入/缺失(indel)左对齐与合并工具
"""

from setuptools import setup, find_packages

# 读取版本号
def get_version():
    with open("leftalign/__init__.py", "r") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"

# 读取长描述
def get_long_description():
    try:
        with open("README.md", "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return "leftalignpy - Indel left-alignment and merging for CIGAR alignments"

setup(
    name="leftalignpy",
    version=get_version(),
    author="leftalignpy developers",
    author_email="",
    description="Indel left-alignment and merging for CIGAR alignments",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
    ],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20.0",
        "scipy>=1.7.0",
        "pandas>=1.3.0",
        "biopython>=1.79",
        "tqdm>=4.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "black>=21.0",
            "isort>=5.0",
            "mypy>=0.900",
        ],
    },
    entry_points={
        "console_scripts": [
            "leftalign=leftalign.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    package_data={"leftalign.config": ["data/*.json"]},
)
