"""Exception types raised by strokefit."""


class StrokeFitError(Exception):
    """Base class for strokefit errors."""


class InvalidArgumentError(StrokeFitError, ValueError):
    """A parameter is out of range or missing."""


class ContinuityError(StrokeFitError):
    """A curve does not connect with its neighbour in a spline."""


class EmptySplineError(StrokeFitError):
    """The operation needs at least one curve in the spline."""


class FitInternalError(StrokeFitError, AssertionError):
    """An internal precondition of the fitter was violated."""
