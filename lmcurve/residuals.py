"""Evaluation of the model against the data.

The objective of the fit is the sum of squared residuals `y - f(x)`. If the
data carries uncertainties, every squared residual is divided by the
variance of that point, which an :class:`ErrorPropagator` estimates by
evaluating the model at a set of perturbed x values.
"""

import numpy as np
from scipy.stats import norm

from .errors import NumericalFailure, InvalidOption

def _apply(f, x, params):
    try:
        return np.array([f(xi) for xi in np.asarray(x).tolist()], dtype=float)
    except (ArithmeticError, TypeError, ValueError) as exc:
        raise NumericalFailure(f"The function could not be evaluated: {exc}\n"
                               f"  p = {None if params is None else params.tolist()}",
                               parameters=params, x=x) from exc

def evaluate_model(x, params, model_function):
    """Evaluate `model_function(params)` at every point of `x`.

    The model is a black box; arithmetic errors it raises
    (e.g. a complex result of a negative base raised to a fractional
    power) are reported as :class:`NumericalFailure`.
    """
    params = np.array(params, dtype=float)
    return _apply(model_function(params), x, params)

def residual_vector(data, params, model_function):
    """Raw residuals `y - f(x)`"""
    return data.y - evaluate_model(data.x, params, model_function)


class ErrorPropagator:
    """Estimates the variance of the model output at every data point.

    The x value of a point is perturbed by `x_error` times each of `samples`
    quantiles of the standard normal distribution. The variance of the model
    output over these perturbed points is combined with `y_error**2`.
    The quantiles are fixed at construction, so two evaluations with the
    same parameters give identical results.

    Override :meth:`combine` to change how the two contributions are merged.
    """

    def __init__(self, samples=50):
        if isinstance(samples, bool) or not isinstance(samples, (int, np.integer)) or samples < 1:
            raise InvalidOption(f"error_propagation must be a positive integer, not {samples!r}")
        self.samples = int(samples)
        self.quantiles = norm.ppf((np.arange(self.samples) + 0.5) / self.samples)
        self.quantiles.flags.writeable = False

    def model_variances(self, data, f, params=None):
        """Variance of `f` at each point caused by `x_error`"""
        variances = np.zeros_like(data.x)
        if data.x_error is None:
            return variances

        for i, (xi, dx) in enumerate(zip(data.x.tolist(), data.x_error.tolist())):
            if dx:
                variances[i] = np.var(_apply(f, xi + dx*self.quantiles, params))
        return variances

    def combine(self, model_variance, y_error):
        """Total variance of a point from the propagated and the y uncertainty"""
        if y_error is None:
            return model_variance
        return model_variance + y_error**2

    def variances(self, data, f, params=None):
        """`sigma**2` for every point. `params` only labels evaluation errors."""
        return self.combine(self.model_variances(data, f, params), data.y_error)

    def weights(self, data, f, params=None):
        """`1/sigma**2` for every point. Points with zero sigma get weight 1."""
        variances = self.variances(data, f, params)
        weights = np.ones_like(variances)
        known = variances > 0
        weights[known] = 1 / variances[known]
        return weights

    def __repr__(self):
        return f"ErrorPropagator({self.samples})"


def sum_of_squared_residuals(data, params, model_function, propagator=None):
    """Sum of squared residuals, weighted by the propagated uncertainties
    if the data has any and a `propagator` is given.

    Raises :class:`NumericalFailure` if the sum is not finite.
    """
    params = np.array(params, dtype=float)
    f = model_function(params)
    values = _apply(f, data.x, params)
    squares = (data.y - values)**2
    if propagator is not None and data.has_errors:
        squares = squares*propagator.weights(data, f, params)

    total = float(np.sum(squares))
    if not np.isfinite(total):
        kind = 'NaN' if np.isnan(total) else 'infinity'
        raise NumericalFailure(f"The function evaluated to {kind}.\n"
                               f"  p = {params.tolist()}\n"
                               f"  f(x) = {values.tolist()}\n"
                               f"  x = {data.x.tolist()}",
                               parameters=params, x=data.x)
    return total
