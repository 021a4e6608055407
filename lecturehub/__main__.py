"""
Package entry point.

Allows running the application via:

    python -m lecturehub

This simply forwards execution to lecturehub.cli.main().
"""

from lecturehub.cli import main

if __name__ == "__main__":
    main()
