"""Allow ``python -m salonbook``."""

from salonbook.cli.main import cli

if __name__ == "__main__":
    cli()
