"""
Results Framework Engine

Objective / Outcome / Output / Indicator hierarchy for NGO project
monitoring plans.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="results-framework-engine",
    version="0.1.0",
    author="Results Framework Contributors",
    description="Bounded, immutable results-framework hierarchy for project M&E plans",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Office/Business",
    ],
    python_requires=">=3.10",
    install_requires=[
        "structlog>=23.1",
        "pydantic-settings>=2.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "resultsframework=resultsframework.cli.main:main",
        ],
    },
)
