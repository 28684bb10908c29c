# Copyright (c) 2025 Denis Moskalets
# Licensed under the MIT License.

"""Configuration helpers for the Last.fm scrobbler."""

import os
from typing import Final

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

REQUIRED_VARS: Final[tuple[str, ...]] = ("LASTFM_API_KEY", "LASTFM_API_SECRET")
OPTIONAL_VARS: Final[tuple[str, ...]] = (
    "LASTFM_USERNAME",
    "LASTFM_PASSWORD",
    "LASTFM_SESSION_KEY",
)


def validate_config() -> list[str] | None:
    """Validate required environment variables.

    Returns:
        List of missing variables if any, None if all required vars are present
    """
    missing_vars = [var for var in REQUIRED_VARS if not os.getenv(var)]
    return missing_vars or None


def get_config() -> dict[str, str | None]:
    """Get configuration values, validating them first.

    Raises:
        ValueError: If required environment variables are missing

    Returns:
        A dictionary containing validated configuration settings.
    """
    if missing := validate_config():
        missing_vars = ", ".join(missing)
        error_message = (
            "Missing required environment variables: "
            f"{missing_vars}\nPlease set them in your .env file"
        )
        raise ValueError(error_message)

    return {var: os.getenv(var) for var in REQUIRED_VARS + OPTIONAL_VARS}
