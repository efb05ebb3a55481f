"""
Entry point for running Marky as a module.

Usage:
    python -m marky [command] [options]
"""

from marky.cli import main

if __name__ == "__main__":
    main()
