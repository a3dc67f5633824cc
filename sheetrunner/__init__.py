"""
SheetRunner - spreadsheet-driven Playwright UI test automation.

Reads the tests to run from an Excel Run Manager, executes them through
pytest with per-thread Playwright browsers, and publishes an HTML report by
email.
"""

__version__ = "0.1.0"
__author__ = "SheetRunner Team"

from .core.config import Config, load_config
from .core.exceptions import SheetRunnerError
from .core.logging_config import setup_logging

__all__ = [
    "Config",
    "load_config",
    "SheetRunnerError",
    "setup_logging",
]
