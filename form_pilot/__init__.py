"""Form Pilot - conversational web form filling."""

__version__ = "0.1.0"
