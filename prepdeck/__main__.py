"""
Entry point for running prepdeck as a module.

Usage:
    python -m prepdeck queue snapshot.json
    python -m prepdeck stats snapshot.json
    python -m prepdeck --help
"""
from .cli import main

if __name__ == "__main__":
    main()
