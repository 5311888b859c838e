"""
Setup script for prepdeck.

prepdeck is the rehearsal engine behind an interview-preparation
workspace. It decides:

1. Which stored answers and stories to rehearse today (SM-2 scheduling)
2. How a single rating moves a card's next review date
3. How ready the user is, as a 0-100 score

The 'prepdeck' command is a read-only inspection CLI over snapshots
exported by the storage layer.
"""

from setuptools import find_packages, setup

setup(
    name="prepdeck",
    version="1.0.0",
    description="Spaced-repetition scheduling and readiness scoring for interview preparation",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "prepdeck=prepdeck.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="interview-prep spaced-repetition sm2 flashcards readiness",
)
