"""Setup configuration for SheetRunner."""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = (
    readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""
)

# Read requirements
requirements_path = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_path.exists():
    requirements = [
        line.strip()
        for line in requirements_path.read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.startswith("#")
    ]

setup(
    name="sheetrunner",
    version="0.1.0",
    description="Spreadsheet-driven Playwright UI test runner with HTML reports and email summaries",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="SheetRunner Team",
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*", "ui_tests", "ui_tests.*"]),
    package_data={"sheetrunner.reporting": ["templates/*.html"]},
    install_requires=requirements,
    extras_require={
        "test": ["pytest-asyncio>=0.21.0"],
    },
    entry_points={
        "console_scripts": [
            "sheetrunner=sheetrunner.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Testing",
        "Topic :: Software Development :: Quality Assurance",
    ],
)
