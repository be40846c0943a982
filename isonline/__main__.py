"""
Main entry point for isonline.
"""
import sys

from isonline.app import main


def main_entry():
    """Runs the command-line tool and exits with its status."""
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
