"""
Main entry point for running git-seal as a module.

Usage:
    python -m gitseal <command> [options]
"""

from .cli import main
import sys

if __name__ == "__main__":
    sys.exit(main())
