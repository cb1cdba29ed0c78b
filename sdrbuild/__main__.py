"""Allow ``python -m sdrbuild``."""

from sdrbuild.main import cli

if __name__ == "__main__":
    cli()
