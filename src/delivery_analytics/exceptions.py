"""
Exceptions raised by the analytics pipeline.
"""


class IntegrityError(ValueError):
    """A row references a parent row that does not exist, or a key is duplicated."""

    def __init__(self, message, violations=None):
        super().__init__(message)
        self.violations = violations or {}
