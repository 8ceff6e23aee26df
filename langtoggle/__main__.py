"""
Entry point for running langtoggle as a module.

Usage:
    python -m langtoggle --help
    python -m langtoggle to de --input notes.txt
    python -m langtoggle back --input notes.txt
"""
from .cli import app


if __name__ == "__main__":
    app()
