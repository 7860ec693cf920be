"""Error types raised by the PR calculation core."""


class InvalidInput(ValueError):
    """Raised when a lift, 1RM, percentage or plate inventory is out of range.

    The message is plain English; callers translate it for display.
    """
