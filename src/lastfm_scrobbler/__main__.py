# Copyright (c) 2025 Denis Moskalets
# Licensed under the MIT License.

"""Main entry point for the lastfm_scrobbler package."""

from .cli import main as cli_main


def main() -> None:
    """Run the Last.fm scrobbler CLI."""
    cli_main()


if __name__ == "__main__":
    main()
