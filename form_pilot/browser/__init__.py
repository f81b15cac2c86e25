"""Browser package for Form Pilot."""

from .browser_manager import BrowserManager
from .page_loader import PageLoader

__all__ = ['BrowserManager', 'PageLoader']
