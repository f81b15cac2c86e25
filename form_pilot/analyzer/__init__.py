"""Analyzer package for Form Pilot."""

from .field_discovery import FieldDiscovery
from .field_classifier import FieldClassifier
from .error_detector import ValidationErrorDetector
from .form_summary import summarize_fields

__all__ = ['FieldDiscovery', 'FieldClassifier', 'ValidationErrorDetector', 'summarize_fields']
