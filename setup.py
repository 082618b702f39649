"""Setup configuration for run-reporter."""

from setuptools import setup, find_packages

setup(
    name="run-reporter",
    version="0.1.0",
    description="Ordered result reporting for multi-lane test runs",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pyyaml>=6.0",
        "pillow>=10.0.0",
        "click>=8.2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "run-reporter=run_reporter.cli:main",
        ],
    },
)
