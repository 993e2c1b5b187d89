from __future__ import annotations


class KubbTrainerError(Exception):
    """Base class for rule-engine errors."""


class InvalidOperationError(KubbTrainerError, ValueError):
    """The operation is not allowed in the current round or session state."""


class RoundAlreadyCompleteError(InvalidOperationError):
    pass


class RoundInProgressError(InvalidOperationError):
    pass


class SessionCompleteError(InvalidOperationError):
    pass


class MalformedInputError(KubbTrainerError, ValueError):
    """Input values are out of range or a stored payload cannot be parsed."""
