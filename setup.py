# setup.py
"""
Python package configuration for datafile-config

Key concepts covered:
- Package versioning (datafile consumers pin the version they were tested with)
- Dependency management (libraries needed)
- File inclusion (sample datafiles get bundled with the package)
- Console script for validating datafiles in CI
"""

from setuptools import setup, find_packages
import os

def read_readme():
    current_dir = os.path.abspath(os.path.dirname(__file__))
    readme_path = os.path.join(current_dir, "README.md")
    if os.path.exists(readme_path):
        with open(readme_path, "r", encoding="utf-8") as f:
            return f.read()
    return "Compiled, read-only index over experimentation datafiles"

setup(
    name="datafile-config",

    # v1.0.0 = datafile versions 2-4, full accessor surface
    version="1.0.0",

    # Package metadata - shows up in pip show, PyPI, etc.
    author="Kevin Waithaka",
    author_email="kevwaithakam@gmail.com",
    description="Compiled, read-only index over experimentation datafiles",
    long_description=read_readme(),
    long_description_content_type="text/markdown",

    packages=find_packages(exclude=["tests", "tests.*"]),

    # Without this, the bundled datafiles wouldn't ship with the package
    include_package_data=True,
    package_data={
        'datafile_config.datafiles': [
            '*.json',
            '*.yaml',
            '*.yml',
        ]
    },

    python_requires=">=3.9",

    install_requires=[
        "pyyaml>=6.0",        # Parsing datafile text (JSON or YAML)
        "pydantic>=2.5",      # Entity models and datafile validation
    ],

    # Install with: pip install -e ".[dev]"
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=22.0.0",      # Code formatting
            "flake8>=4.0.0",      # Linting
            "mypy>=0.950",        # Type checking
        ]
    },

    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],

    entry_points={
        'console_scripts': [
            'datafile-config=datafile_config.cli:main',
        ],
    },

    project_urls={
        "Bug Reports": "https://github.com/whitehackr/flit-experiments/issues",
        "Source": "https://github.com/whitehackr/flit-experiments",
    },
)
