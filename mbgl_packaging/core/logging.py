"""
Centralized logging manager for the binary packaging tool
"""
import sys

from loguru import logger

LOG_FORMAT = "<level>{level: <8}</level> {message}"


class LoggingManager:
    def __init__(self, log_level: str = "INFO"):
        self.log_level = log_level.upper()

    def setup(self):
        # progress goes to stdout, warnings and diagnostics to stderr
        warning_no = logger.level("WARNING").no
        stderr_level = self.log_level if logger.level(self.log_level).no > warning_no else "WARNING"
        logger.remove()
        logger.add(
            sys.stdout,
            level=self.log_level,
            format=LOG_FORMAT,
            filter=lambda record: record["level"].no < warning_no,
        )
        logger.add(sys.stderr, level=stderr_level, format=LOG_FORMAT)
        logger.debug(f"Logging initialized at level: {self.log_level}")

