"""
setup-buildx - Main entry point

Allows `python -m setupbuildx`, delegating to cli.py.
"""

from .cli import cli

if __name__ == "__main__":
    cli()
