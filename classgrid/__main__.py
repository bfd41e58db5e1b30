"""
Package entry point.

Allows running the application via:

    python -m classgrid

This simply forwards execution to classgrid.cli.main().
"""

from classgrid.cli import main

if __name__ == "__main__":
    main()
