"""
__main__.py

This file adds support for running redpaper as a python module instead of invoking the "redpaper"
command line entrypoint, e.g. python -m redpaper run
"""

from redpaper.cli import main


if __name__ == "__main__":
    main()
