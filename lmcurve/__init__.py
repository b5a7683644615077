"""lmcurve - nonlinear least-squares curve fitting with Levenberg-Marquardt.

The model to fit is a function that takes the parameters and returns a
function of the independent variable::

    def sine(params):
        a, b = params
        return lambda t: a*np.sin(b*t)

Fitting it to some data is a single call::

    >>> result = fit({'x': t_data, 'y': y_data}, sine, initial_values=[1, 1])
    >>> print(result.parameter_values)
    [2.0001, 2.9999]

The result also holds the final sum of squared residuals (`residuals`),
the number of iterations used and whether the fit converged.

Note that:

    1. The number of parameters is taken from `initial_values`. If you want
       to start from all ones, give `parameter_count` instead.

    2. Parameters can be bounded with `min_values` and `max_values`. The
       candidate parameters are clipped into the bounds in every iteration.

    3. If the data has uncertainties (`x_error`, `y_error`), every squared
       residual is divided by the variance of its point. The variance caused
       by `x_error` is estimated by evaluating the model at
       `error_propagation` perturbed x values.

    4. A model that evaluates to NaN stops the fit with a
       :class:`NumericalFailure`. Reaching `max_iterations` does not raise;
       check `result.converged`.

To fit the same model repeatedly or to plot the result, use a
:class:`CurveFitter`::

    >>> fitter = CurveFitter(sine, initial_values=[1, 1])
    >>> result = fitter.fit(data)
    >>> fitter.plot(data, result)

"""

from .errors import FitError, InvalidOption, InvalidData, NumericalFailure
from .parameters import Dataset, Options, Result, IterationState
from .residuals import ErrorPropagator, sum_of_squared_residuals
from .step import compute_step
from .fitter import CurveFitter, fit

__all__ = ['fit', 'CurveFitter', 'Dataset', 'Options', 'Result', 'IterationState',
           'ErrorPropagator', 'sum_of_squared_residuals', 'compute_step',
           'FitError', 'InvalidOption', 'InvalidData', 'NumericalFailure']
