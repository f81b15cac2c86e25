"""Utility functions for Form Pilot."""

from .logger import logger, PilotLogger
from .wait_utils import WaitUtils
from .dom_utils import DOMUtils

__all__ = ['logger', 'PilotLogger', 'WaitUtils', 'DOMUtils']
