"""Exception types raised at the boundary of the judgment engine.

The engine itself never raises on validated input. These errors are
raised while building aggregates, resolving configuration keys, or
when a caller mixes incompatible grade scales in one computation.
"""


class MJudgeError(Exception):
    """Base exception for all application-specific errors."""


class MalformedAggregateError(MJudgeError, ValueError):
    """Raised when grade counts do not fit the declared scale."""


class ScaleMismatchError(MJudgeError, ValueError):
    """Raised when aggregates on different grade scales are compared."""


class UnknownStrategyError(MJudgeError, ValueError):
    """Raised when a tie-break strategy key is not registered."""


class UnknownScaleError(MJudgeError, ValueError):
    """Raised when a grade scale preset name is not configured."""
