"""
Data containers shared by the fitting modules.

.. autoclass Dataset
.. autoclass Options
.. autoclass Result
"""

from collections import namedtuple

from numpy import asarray, finfo, all as np_all, isfinite

from .errors import InvalidData

MAX_SAFE_INTEGER = 2**53 - 1

_Dataset = namedtuple('Dataset', ['x', 'y', 'x_error', 'y_error'],
                      defaults=[None, None])

class Dataset(_Dataset):
    """Observed points to fit.

    `x` and `y` are converted to float arrays of equal length (at least 2).
    `x_error` and `y_error` are optional per-point uncertainties.
    """
    __slots__ = ()

    def __new__(cls, x, y, x_error=None, y_error=None):
        try:
            x = asarray(x, dtype=float)
            y = asarray(y, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidData(f"x and y must be sequences of numbers: {exc}") from exc

        if x.ndim != 1 or y.ndim != 1:
            raise InvalidData("x and y must be one-dimensional")
        if len(x) < 2 or len(y) < 2:
            raise InvalidData("The data must have at least 2 points")
        if len(x) != len(y):
            raise InvalidData("The data must have an equal number"
                              f" of x ({len(x)}) and y ({len(y)}) coordinates")

        x_error = cls._check_error('x_error', x_error, len(x))
        y_error = cls._check_error('y_error', y_error, len(x))

        return super().__new__(cls, x, y, x_error, y_error)

    @staticmethod
    def _check_error(name, values, n):
        if values is None:
            return None
        values = asarray(values, dtype=float)
        if values.shape != (n,):
            raise InvalidData(f"{name} must have one entry per point ({n}),"
                              f" got shape {values.shape}")
        if not np_all(isfinite(values)) or (values < 0).any():
            raise InvalidData(f"{name} must be finite and non-negative")
        return values

    @property
    def has_errors(self):
        "True if any uncertainty was supplied"
        return self.x_error is not None or self.y_error is not None

    @property
    def size(self):
        "Number of points"
        return len(self.x)


_OPTION_DEFAULTS = dict(
    damping=0.1,
    damping_drop=0.1,
    damping_boost=1.5,
    min_damping=finfo(float).eps,
    max_damping=MAX_SAFE_INTEGER,
    gradient_difference=1e-6,
    min_values=None,
    max_values=None,
    initial_values=None,
    parameter_count=None,
    max_iterations=100,
    residual_epsilon=1e-6,
    error_propagation=50,
    callback=None,
)

class Options(namedtuple('Options', list(_OPTION_DEFAULTS),
                         defaults=list(_OPTION_DEFAULTS.values()))):
    """Immutable fit configuration.

        - damping : initial Levenberg-Marquardt lambda, must be positive
        - damping_drop : factor applied to damping after an accepted step
        - damping_boost : factor applied to damping after a rejected step
        - min_damping, max_damping : clamp for the damping parameter
        - gradient_difference : step used for finite-difference derivatives
        - min_values, max_values : per-parameter bounds
        - initial_values : starting parameters
        - parameter_count : number of parameters if `initial_values` is omitted
        - max_iterations : iteration cap
        - residual_epsilon : convergence threshold for the residual change
        - error_propagation : samples per point used to propagate `x_error`,
          or an :class:`lmcurve.residuals.ErrorPropagator`
        - callback : called with an :class:`IterationState` after every iteration
    """
    __slots__ = ()


IterationState = namedtuple('IterationState',
                            ['iteration', 'parameters', 'candidate',
                             'residuals', 'damping', 'accepted'])
IterationState.__doc__ = "Snapshot passed to `Options.callback` after every iteration."


# Keys understood by Result.__getitem__ besides the field names
_LEGACY_RESULT_KEYS = {
    'parameterValues': 'parameter_values',
    'parameterError': 'parameter_error',
}

class Result(namedtuple('Result', ['parameter_values', 'residuals', 'iterations',
                                   'parameter_error', 'converged'])):
    """Outcome of a fit.

    Apart from attribute access, the result can be indexed by field
    name, including the camelCase names of older releases
    (``result['parameterValues']``).
    """
    __slots__ = ()

    def __getitem__(self, key):
        if isinstance(key, str):
            field = _LEGACY_RESULT_KEYS.get(key, key)
            if field not in self._fields:
                raise KeyError(key)
            return getattr(self, field)
        return super().__getitem__(key)

    def __str__(self):
        state = 'converged' if self.converged else 'not converged'
        return f"Result({[float(p) for p in self.parameter_values]}, residuals={self.residuals:g}," \
               f" {self.iterations} iterations, {state})"
