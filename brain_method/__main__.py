"""
Entry point for running brain_method as a module.

Usage: python -m brain_method [args]
"""

from brain_method.cli import main

if __name__ == "__main__":
    main()
