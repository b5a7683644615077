"""A single Levenberg-Marquardt step.

The model is linearized around the current parameters with a forward
finite-difference Jacobian `J` and the damped normal equations

    (J^T J + damping*I) delta = J^T r

are solved for the update `delta`, where `r = y - f(x)`. Large damping
gives a short step along the gradient, small damping a Gauss-Newton step.
"""

import logging

import numpy as np
from scipy.linalg import cho_factor, cho_solve, lstsq, LinAlgError

from .errors import NumericalFailure
from .residuals import evaluate_model

log = logging.getLogger(__name__)

def jacobian(x, params, gradient_difference, model_function, evaluated=None):
    """Forward-difference estimate of `df(x_i)/dparams_k`.

    Returns an array of shape `(len(x), len(params))`. `evaluated` may
    hold `f(x)` at `params` if it is already known.
    """
    params = np.asarray(params, dtype=float)
    if evaluated is None:
        evaluated = evaluate_model(x, params, model_function)

    J = np.empty((len(x), len(params)))
    for k in range(len(params)):
        shifted = params.copy()
        shifted[k] += gradient_difference
        J[:, k] = (evaluate_model(x, shifted, model_function) - evaluated) / gradient_difference
    return J

def solve_damped(J, r, damping):
    """Solve `(J^T J + damping*I) delta = J^T r` for `delta`.

    Cholesky is tried first, since the matrix is symmetric and positive
    definite for positive damping. A least-squares solution is used if the
    factorization fails.
    """
    JT = J.T
    lhs = JT @ J + damping*np.eye(J.shape[1])
    rhs = JT @ r
    try:
        delta = cho_solve(cho_factor(lhs), rhs)
    except (LinAlgError, ValueError):
        log.debug("Cholesky factorization failed at damping %g, using lstsq", damping)
        try:
            delta = lstsq(lhs, rhs)[0]
        except (LinAlgError, ValueError) as exc:
            raise NumericalFailure(f"The damped normal equations could not be solved: {exc}") from exc
    return delta

def compute_step(data, params, damping, gradient_difference, model_function):
    """Return the candidate parameters `params + delta`, before bound clipping."""
    params = np.asarray(params, dtype=float)
    evaluated = evaluate_model(data.x, params, model_function)
    r = data.y - evaluated
    J = jacobian(data.x, params, gradient_difference, model_function, evaluated)

    if not (np.all(np.isfinite(J)) and np.all(np.isfinite(r))):
        raise NumericalFailure("The function evaluated to NaN while estimating the Jacobian.\n"
                               f"  p = {params.tolist()}\n"
                               f"  x = {data.x.tolist()}",
                               parameters=params, x=data.x)

    delta = solve_damped(J, r, damping)
    if not np.all(np.isfinite(delta)):
        raise NumericalFailure("The damped normal equations have no finite solution.\n"
                               f"  p = {params.tolist()}\n"
                               f"  damping = {damping}",
                               parameters=params, x=data.x)
    return params + delta
