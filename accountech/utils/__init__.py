# Utils Package
# Utility Functions and Helpers

from .logger import logger, setup_logger
from .helpers import *
from .constants import *
from .exceptions import *
from .decorators import retry, timed

__all__ = [
    "logger",
    "setup_logger",
    "retry",
    "timed"
]
