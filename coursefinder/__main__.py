"""
Package entry point.

Allows running the application via:

    python -m coursefinder

This simply forwards execution to coursefinder.cli.main().
"""

from coursefinder.cli import main

if __name__ == "__main__":
    main()
