"""
Entry point for running blisbuild as a module.

Usage: python -m blisbuild [command] [options]
"""

from blisbuild.cli.parser import main

if __name__ == "__main__":
    main()
