"""
Entry point for running the CLI as a module.

Usage:
    python -m h2subsidy_api serve
"""

from h2subsidy_api.cli import main

if __name__ == "__main__":
    main()
