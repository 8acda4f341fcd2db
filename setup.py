"""Setup configuration for Closet Filter package."""

from setuptools import setup, find_packages

setup(
    name="closet-filter",
    version="1.0.0",
    description="Filter and search engine for a clothing item catalog",
    author="Alex",
    author_email="",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "duckdb>=1.2.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "fastapi>=0.110.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=4.1.0",
            "httpx>=0.26.0",
            "black>=24.1.0",
            "ruff>=0.2.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "closet-filter=closet_filter.cli:main",
        ],
    },
)
