"""console script entrypoint for the woci CLI."""

from .cli import main


def run() -> int:
    return main()


if __name__ == "__main__":
    raise SystemExit(run())
