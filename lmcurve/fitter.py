""":func:`fit` and :class:`CurveFitter` are defined here."""

import logging
from collections import deque
from collections.abc import Sequence

import matplotlib
import matplotlib.pyplot as plt
import numpy as np

from .adapters import compat_data, compat_options, compat_result
from .errors import InvalidOption
from .parameters import Options, Result, IterationState
from .residuals import ErrorPropagator, evaluate_model, sum_of_squared_residuals
from .step import compute_step

log = logging.getLogger(__name__)

# Number of recent residual changes that must all be below
# `residual_epsilon` to stop
CONVERGENCE_WINDOW = 10

_NUMERIC_OPTIONS = ('damping', 'damping_drop', 'damping_boost', 'min_damping', 'max_damping',
                    'gradient_difference', 'max_iterations', 'residual_epsilon')

def _check_positive(options, name):
    value = getattr(options, name)
    try:
        positive = value > 0
    except TypeError:
        positive = False
    if not positive:
        raise InvalidOption(f"The {name} option must be a positive number, not {value!r}")

def _float_array(name, value):
    try:
        return np.array(value, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidOption(f"{name} must be an array of numbers: {exc}") from exc

def resolve_options(options):
    """Check `options` and fill in the defaults that depend on other options.

    Returns a new :class:`Options` with `initial_values`, `min_values`
    and `max_values` as float arrays and `error_propagation` as an
    :class:`ErrorPropagator`.
    """
    _check_positive(options, 'damping')
    for name in _NUMERIC_OPTIONS:
        value = getattr(options, name)
        if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
            raise InvalidOption(f"The {name} option must be a number, not {value!r}")
    _check_positive(options, 'min_damping')
    _check_positive(options, 'max_damping')
    if options.min_damping > options.max_damping:
        raise InvalidOption("min_damping must not exceed max_damping")
    if not 0 < options.damping_drop <= 1:
        raise InvalidOption(f"damping_drop must be in (0, 1], not {options.damping_drop!r}")
    if not options.damping_boost >= 1:
        raise InvalidOption(f"damping_boost must be at least 1, not {options.damping_boost!r}")
    if not (np.isfinite(options.gradient_difference) and options.gradient_difference != 0):
        raise InvalidOption("gradient_difference must be a finite non-zero number")
    if not isinstance(options.max_iterations, (int, np.integer)) or options.max_iterations < 0:
        raise InvalidOption(f"max_iterations must be a non-negative integer,"
                            f" not {options.max_iterations!r}")
    if not options.residual_epsilon >= 0:
        raise InvalidOption("residual_epsilon must not be negative")
    if options.callback is not None and not callable(options.callback):
        raise InvalidOption("callback must be callable")

    initial_values = options.initial_values
    if initial_values is None:
        if options.parameter_count is None:
            raise InvalidOption("Either initial_values or parameter_count must be given")
        if isinstance(options.parameter_count, bool) or \
           not isinstance(options.parameter_count, (int, np.integer)) or \
           options.parameter_count < 1:
            raise InvalidOption("parameter_count must be a positive integer")
        initial_values = np.ones(options.parameter_count)
    elif isinstance(initial_values, (str, bytes)) or \
         not isinstance(initial_values, (Sequence, np.ndarray)):
        raise InvalidOption("initial_values must be an array")
    else:
        initial_values = _float_array('initial_values', initial_values)
        if initial_values.ndim != 1 or not initial_values.size:
            raise InvalidOption("initial_values must be a non-empty 1D array")
        if options.parameter_count is not None and options.parameter_count != initial_values.size:
            raise InvalidOption(f"parameter_count is {options.parameter_count},"
                                f" but {initial_values.size} initial values were given")

    n = initial_values.size
    biggest = np.finfo(float).max
    min_values = np.full(n, -biggest) if options.min_values is None \
                 else _float_array('min_values', options.min_values)
    max_values = np.full(n, biggest) if options.max_values is None \
                 else _float_array('max_values', options.max_values)

    if min_values.shape != max_values.shape:
        raise InvalidOption("min_values and max_values should be the same size")
    if min_values.shape != (n,):
        raise InvalidOption(f"Bounds must have one entry per parameter ({n}),"
                            f" got {min_values.size}")
    if np.isnan(min_values).any() or np.isnan(max_values).any():
        raise InvalidOption("min_values and max_values must not contain NaN")
    if (min_values > max_values).any():
        raise InvalidOption("min_values must not exceed max_values")

    propagator = options.error_propagation
    if not isinstance(propagator, ErrorPropagator):
        propagator = ErrorPropagator(propagator)

    return options._replace(initial_values=initial_values,
                            min_values=min_values,
                            max_values=max_values,
                            error_propagation=propagator)

def levenberg_marquardt(data, model_function, options):
    """Run the damped Gauss-Newton iteration.

    `data` is a :class:`Dataset` and `options` a resolved :class:`Options`
    (see :func:`resolve_options`). Returns a :class:`Result`.
    """
    propagator = options.error_propagation
    min_values, max_values = options.min_values, options.max_values

    params = np.clip(options.initial_values, min_values, max_values)
    residuals = sum_of_squared_residuals(data, params, model_function, propagator)
    damping = options.damping

    residual_differences = deque([np.nan]*CONVERGENCE_WINDOW, maxlen=CONVERGENCE_WINDOW)
    converged = False
    iteration = 0

    while iteration < options.max_iterations and not converged:
        candidate = compute_step(data, params, damping,
                                 options.gradient_difference, model_function)
        candidate = np.clip(candidate, min_values, max_values)

        candidate_residuals = sum_of_squared_residuals(data, candidate,
                                                       model_function, propagator)

        accepted = candidate_residuals < residuals
        residual_differences.append(abs(residuals - candidate_residuals))
        if accepted:
            params = candidate
            residuals = candidate_residuals
            damping *= options.damping_drop
        else:
            damping *= options.damping_boost

        damping = max(options.min_damping, min(options.max_damping, damping))

        converged = bool(np.max(residual_differences) <= options.residual_epsilon)
        iteration += 1

        log.debug("iteration %d: residuals %g, damping %g, step %s",
                  iteration, residuals, damping, 'accepted' if accepted else 'rejected')

        if options.callback is not None:
            options.callback(IterationState(iteration=iteration,
                                            parameters=params.copy(),
                                            candidate=candidate.copy(),
                                            residuals=residuals,
                                            damping=damping,
                                            accepted=accepted))

    if converged:
        log.info("Converged after %d iterations", iteration)
    else:
        log.info("Stopped after %d iterations without converging", iteration)

    # With uncertainties in the data this is the weighted sum, which is
    # also what parameter_error reports
    residuals = sum_of_squared_residuals(data, params, model_function, propagator)

    return Result(parameter_values=params,
                  residuals=residuals,
                  iterations=iteration,
                  parameter_error=residuals,
                  converged=converged)

def fit(data, model_function, options=None, **kwargs):
    """Fit `model_function` to `data` with the Levenberg-Marquardt algorithm.

    `data` is a :class:`Dataset`, a mapping with `x`, `y` and optionally
    `x_error`, `y_error` entries, or an `(x, y)` pair.

    `model_function` takes a parameter array and returns a function of x::

        def sine(params):
            a, b = params
            return lambda t: a*np.sin(b*t)

    Options (see :class:`Options`) are given as a mapping in `options`,
    as keyword arguments, or both; keyword arguments take precedence.
    The camelCase names of older releases are accepted as well.

    Raises :class:`InvalidOption` or :class:`InvalidData` for bad input
    and :class:`NumericalFailure` if the model evaluates to NaN.
    Running out of iterations is not an error; check `Result.converged`.
    """
    merged = compat_options(options)
    merged.update(compat_options(kwargs))

    if not callable(model_function):
        raise TypeError("model_function must be callable")

    raw = Options(**merged)
    _check_positive(raw, 'damping')

    data = compat_data(data)
    resolved = resolve_options(raw)

    return compat_result(levenberg_marquardt(data, model_function, resolved))


class CurveFitter:
    """Fits one model function, possibly to several datasets.

    Options given to the constructor are used as defaults for every
    :meth:`fit` call::

        >>> fitter = CurveFitter(sine, initial_values=[1, 1])
        >>> result = fitter.fit(data, max_iterations=200)
        >>> fitter.plot(data, result)
    """

    def __init__(self, model_function, **defaults):
        if not callable(model_function):
            raise TypeError("model_function must be callable")
        self.model_function = model_function
        self.defaults = compat_options(defaults)

    def fit(self, data, **options):
        merged = dict(self.defaults)
        merged.update(compat_options(options))
        return fit(data, self.model_function, merged)

    def plot(self, data, result=None, ax=None, points=200,
             color=None, label=None, data_kwargs={}, plot_kwargs={}):
        """Plot `data` and the model curve.

        The curve is drawn with the parameters of `result`, or with the
        initial values of the fitter if `result` is None. Error bars are
        drawn when the data has uncertainties. `data_kwargs` and
        `plot_kwargs` are passed to `Axes.errorbar` and `Axes.plot`.

        Returns the axes.
        """
        data = compat_data(data)
        if ax is None:
            ax = plt.gca()

        if result is not None:
            params = result.parameter_values
        elif self.defaults.get('initial_values') is not None:
            params = self.defaults['initial_values']
        else:
            raise ValueError("No parameters to plot: give a result or initial_values")

        if color is None:
            color = matplotlib.rcParams['axes.prop_cycle'].by_key()['color'][0]

        data_kwargs = dict(dict(linestyle='', marker='.', color=color), **data_kwargs)
        ax.errorbar(data.x, data.y, xerr=data.x_error, yerr=data.y_error,
                    label="Experiment" if label is None else f"{label} experiment",
                    **data_kwargs)

        x_fine = np.linspace(np.amin(data.x), np.amax(data.x), points)
        plot_kwargs = dict(dict(linestyle='-', color=color), **plot_kwargs)
        ax.plot(x_fine, evaluate_model(x_fine, params, self.model_function),
                label="Fit" if label is None else f"{label} fit",
                **plot_kwargs)

        ax.legend()
        return ax
