"""Allow running as ``python -m blogctl``."""

from blogctl.cli import app

if __name__ == "__main__":
    app()
