"""
Root path checks performed before a search starts.
"""

import os
import logging

from ..config.parser import ConfigurationError


logger = logging.getLogger(__name__)


def path_exists(path: str) -> bool:
    """
    Check whether a path exists.

    Only a definite "not found" counts as missing; a path that exists but
    cannot be stat'ed for another reason (e.g. permissions) is treated as
    present and left for the walker to deal with.
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except NotADirectoryError:
        return False
    except OSError as e:
        logger.debug(f"Cannot stat {path}, assuming it exists: {e}")
    return True


def probe_root(path: str) -> None:
    """
    Ensure the search root exists.

    Raises:
        ConfigurationError: If the path does not exist
    """
    if not path_exists(path):
        raise ConfigurationError(f"Path provided does not exist: {path}")
