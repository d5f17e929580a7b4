"""Core domain types: options, exit codes, results."""

from .config import CONFIG_FILENAME, ConfigError, Options, load_config, resolve_options
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "CONFIG_FILENAME",
    "ConfigError",
    "Options",
    "load_config",
    "resolve_options",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
