"""Entry point for python -m structscope."""

from .cli import parse_args, setup_logging
from .runners.headless import run_headless


def main():
    """Main entry point."""
    config = parse_args()
    setup_logging(config.verbose)
    run_headless(config)


if __name__ == "__main__":
    main()
