"""
setup.py for depprobe

Runtime Requirements:
- PyYAML for dependencies.yaml / platforms.yaml
- pydantic for validating probe requests and configuration

Development:
- pip install -e .[dev]
- pytest
"""

from pathlib import Path
from setuptools import setup, find_packages

readme = Path(__file__).parent / "README.md"
long_description = readme.read_text(encoding="utf-8") if readme.exists() else ""

setup(
    name="depprobe",
    version="1.0.0",
    description="Cached discovery of third-party C/C++ headers and libraries",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["depprobe", "depprobe.*"]),
    package_data={
        "depprobe": [
            "config/*.yaml",
        ]
    },
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "depprobe=depprobe.main:main",
        ],
    },
    zip_safe=False,
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
        "pydantic>=2.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
        ]
    },
)
