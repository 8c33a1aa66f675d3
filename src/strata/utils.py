"""Utility functions for strata."""

import importlib.metadata
import logging

DISTRIBUTION_NAME = "strata-dotfiles"


def setup_logging(verbose: bool = False):
    """Configure the root logger for command-line use.

    Only the first call has an effect; later calls are ignored by
    ``logging.basicConfig``.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


def get_version() -> str:
    """Installed package version, or ``(development)`` for a source tree."""
    try:
        return importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        return "(development)"
