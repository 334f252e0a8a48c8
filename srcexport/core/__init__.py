"""srcexport Core - Shared utilities.

This package holds the building blocks used throughout srcexport.

Import specific names from submodules:
    from srcexport.core.config import ConfigManager
    from srcexport.core.settings import Settings
    from srcexport.core import constants
    from srcexport.core import errors
    from srcexport.core import file_ops
    from srcexport.core import links
    from srcexport.core import logging
    from srcexport.core import validators
"""

# Re-export leaf modules for convenience; settings and config depend on the
# rules package and are imported from their own modules.
from srcexport.core import constants, errors, file_ops, links, logging, validators

__all__ = [
    "constants",
    "errors",
    "file_ops",
    "links",
    "logging",
    "validators",
]
