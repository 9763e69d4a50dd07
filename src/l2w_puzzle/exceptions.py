# exceptions.py - Exceptions raised inside the L2W engines


class L2WError(Exception):
    """Base class for all package errors."""
    pass


class InvalidTransitionError(L2WError):
    """Raised when the phase machine is asked to take an edge that does not exist."""
    pass


class FeedbackConfigError(L2WError):
    """Raised when the feedback endpoint is missing or malformed."""
    pass
