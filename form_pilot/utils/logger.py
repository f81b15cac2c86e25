"""
Structured logging for Form Pilot.
Provides step-by-step tracking of the discovery → fill → submit pipeline.
"""

import logging
import sys
from typing import Any, Optional


class PilotLogger:
    """Custom logger with pipeline step tracking."""

    def __init__(self, name: str = "FormPilot", level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        # Remove existing handlers
        self.logger.handlers.clear()

        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

        self.current_step: Optional[int] = None

    def set_level(self, level: str):
        """Change the log level at runtime."""
        self.logger.setLevel(getattr(logging, level.upper()))

    def step(self, step_number: int, message: str):
        """Log a pipeline step."""
        self.current_step = step_number
        self.logger.info(f"[STEP {step_number:02d}] {message}")

    def info(self, message: str):
        self.logger.info(message)

    def debug(self, message: str):
        self.logger.debug(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def success(self, message: str):
        """Log success message."""
        self.logger.info(f"[OK] {message}")

    def metric(self, name: str, value: Any):
        """Log a metric."""
        self.logger.info(f"[METRIC] {name}: {value}")


# Global logger instance
logger = PilotLogger()
