"""Allow running as python -m gameloc."""

from gameloc.cli import app


def main() -> None:
    app()


main()
