"""Exceptions raised by :func:`lmcurve.fit`."""


class FitError(Exception):
    """Base class for all errors raised by this package."""


class InvalidOption(FitError, ValueError):
    """Malformed fit configuration (non-positive damping, bad bounds etc.)."""


class InvalidData(FitError, ValueError):
    """Malformed dataset (missing x or y, too few points, length mismatch)."""


class NumericalFailure(FitError, ArithmeticError):
    """The model evaluated to NaN or the damped system could not be solved.

    `parameters` holds the offending parameter vector and `x` the data
    the model was evaluated on, if known.
    """

    def __init__(self, message, parameters=None, x=None):
        super().__init__(message)
        self.parameters = parameters
        self.x = x
