"""Exception hierarchy for Form Pilot."""


class FormPilotError(Exception):
    """Base exception for Form Pilot errors."""
    pass


class UserCancelledError(FormPilotError):
    """Raised when the human answers a prompt with a cancellation word."""
    pass


class DiscoveryError(FormPilotError):
    """Raised when the page cannot be scanned for form controls."""
    pass


class FieldFillError(FormPilotError):
    """Raised when a value cannot be applied to a resolved element."""
    pass


class SubmitError(FormPilotError):
    """Raised when no submit control or form element can be triggered."""
    pass
