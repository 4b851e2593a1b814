"""
Setup script for the stochProx package.

stochProx turns optimization models with random parameters and recourse
decisions into a deterministic equivalent LP that an ordinary linear solver
can consume.

Install for development:
    pip install -e ".[dev]"
"""

from setuptools import find_packages, setup

setup(
    name="stochprox",
    version="0.1.0",
    description="Scenario generation and deterministic equivalents for stochastic LPs",
    package_dir={"": "python"},
    packages=find_packages(where="python"),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.7",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "hypothesis>=6.0",
            "black>=23.0",
            "ruff>=0.1.0",
            "mypy>=1.0",
        ],
    },
)
