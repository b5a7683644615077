import numpy as np
import pytest

from lmcurve import Dataset, NumericalFailure
from lmcurve.step import jacobian, solve_damped, compute_step
from models import line, sine


@pytest.fixture
def line_points():
    xs = np.linspace(-2, 2, 9)
    return Dataset(xs, 3*xs - 1)

def test_jacobian_of_line(line_points):
    J = jacobian(line_points.x, [1, 1], 1e-6, line)
    assert J.shape == (9, 2)
    np.testing.assert_allclose(J[:, 0], line_points.x, atol=1e-6)
    np.testing.assert_allclose(J[:, 1], 1, atol=1e-6)

def test_jacobian_of_sine():
    xs = np.linspace(0, 3, 7)
    J = jacobian(xs, [2, 0.5], 1e-7, sine)
    np.testing.assert_allclose(J[:, 0], np.sin(0.5*xs), atol=1e-5)
    np.testing.assert_allclose(J[:, 1], 2*xs*np.cos(0.5*xs), atol=1e-5)

def test_jacobian_does_not_modify_params():
    params = np.array([2., 0.5])
    jacobian(np.linspace(0, 1, 3), params, 1e-6, sine)
    np.testing.assert_array_equal(params, [2, 0.5])

def test_gauss_newton_step_solves_a_line(line_points):
    candidate = compute_step(line_points, [0, 0], 1e-12, 1e-6, line)
    np.testing.assert_allclose(candidate, [3, -1], atol=1e-5)

def test_damping_shortens_the_step(line_points):
    start = np.array([0., 0.])
    short = compute_step(line_points, start, 100, 1e-6, line) - start
    long = compute_step(line_points, start, 0.01, 1e-6, line) - start
    assert np.linalg.norm(short) < np.linalg.norm(long)

def test_step_returns_new_array(line_points):
    params = np.array([0., 0.])
    candidate = compute_step(line_points, params, 0.1, 1e-6, line)
    assert candidate is not params
    np.testing.assert_array_equal(params, [0, 0])

def test_solve_damped_matches_normal_equations():
    rng = np.random.default_rng(1)
    J = rng.normal(size=(6, 3))
    r = rng.normal(size=6)
    delta = solve_damped(J, r, 0.5)
    np.testing.assert_allclose((J.T @ J + 0.5*np.eye(3)) @ delta, J.T @ r)

def test_solve_damped_singular_falls_back_to_lstsq():
    delta = solve_damped(np.zeros((3, 2)), np.ones(3), 0)
    np.testing.assert_allclose(delta, [0, 0])

def test_flat_model_does_not_move(line_points):
    def flat(params):
        return lambda t: 0.0

    candidate = compute_step(line_points, [1, 2], 0.1, 1e-6, flat)
    np.testing.assert_allclose(candidate, [1, 2])

def test_nan_jacobian(line_points):
    def blows_up(params):
        a, b = params
        return lambda t: np.log(1 - a)*t + b

    # a + gradient_difference crosses into log of a negative number
    with pytest.raises(NumericalFailure, match="evaluated to NaN"):
        compute_step(line_points, [1 - 1e-9, 0], 0.1, 1e-6, blows_up)

def test_solve_damped_overflow():
    # J^T J overflows to infinity, which neither solver accepts
    with pytest.raises(NumericalFailure, match="could not be solved"):
        solve_damped(np.full((3, 2), 1e200), np.ones(3), 0.1)

def test_step_with_unsolvable_system(line_points):
    def steep(params):
        a, = params
        return lambda t: a*1e200*t

    with pytest.raises(NumericalFailure, match="could not be solved"):
        compute_step(line_points, [1], 0.1, 1e-6, steep)
