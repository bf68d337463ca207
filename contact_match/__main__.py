"""Entry point for running contact_match as a module.

Usage:
    python -m contact_match <command> [options]
"""

from contact_match.cli import main

if __name__ == "__main__":
    main()
