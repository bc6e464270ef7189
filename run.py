import sys

from offline_scrobbler.main import main


def run():
    """Entry point for the offline-scrobbler command."""
    sys.exit(main())


if __name__ == "__main__":
    run()
