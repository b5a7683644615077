import numpy as np
import pytest

from lmcurve import Dataset, Result, InvalidData, InvalidOption, fit
from lmcurve.adapters import (compat_data, compat_options, compat_result,
                              snake_case, canonical_option_name)
from models import line


@pytest.mark.parametrize('name, expected', [
    ('damping', 'damping'),
    ('dampingBoost', 'damping_boost'),
    ('initialValues', 'initial_values'),
    ('maxIterations', 'max_iterations'),
    ('residual_epsilon', 'residual_epsilon'),
])
def test_snake_case(name, expected):
    assert snake_case(name) == expected

def test_legacy_option_names():
    options = compat_options({'initialValues': [1, 2], 'gradientDifference': 1e-4,
                              'max_iterations': 10})
    assert options == {'initial_values': [1, 2], 'gradient_difference': 1e-4,
                       'max_iterations': 10}

def test_error_tolerance_is_deprecated():
    with pytest.warns(DeprecationWarning, match="errorTolerance"):
        options = compat_options({'errorTolerance': 1e-3})
    assert options == {'residual_epsilon': 1e-3}

def test_option_given_twice():
    with pytest.raises(InvalidOption, match="twice"):
        compat_options({'maxIterations': 1, 'max_iterations': 2})

def test_unknown_option():
    with pytest.raises(InvalidOption, match="Unknown option 'dampening'"):
        canonical_option_name('dampening')

def test_options_must_be_a_mapping():
    assert compat_options(None) == {}
    with pytest.raises(InvalidOption):
        compat_options([('damping', 1)])

def test_data_from_legacy_mapping():
    data = compat_data({'x': [1, 2], 'y': [3, 4], 'xError': [0.1, 0.1], 'yError': [0, 1]})
    assert isinstance(data, Dataset)
    np.testing.assert_array_equal(data.x_error, [0.1, 0.1])
    np.testing.assert_array_equal(data.y_error, [0, 1])
    assert data.has_errors
    assert data.size == 2

def test_data_from_pair():
    data = compat_data(([1, 2, 3], [2, 4, 6]))
    np.testing.assert_array_equal(data.y, [2, 4, 6])
    assert not data.has_errors

def test_dataset_passes_through():
    data = Dataset([1, 2], [3, 4])
    assert compat_data(data) is data

@pytest.mark.parametrize('raw', [
    None,
    {'x': [1, 2], 'y': [1, 2], 'z': [1, 2]},
    {'x': [1, 2], 'y': [1, 2], 'xError': [1, 1], 'x_error': [1, 1]},
    {'x': [1, 2], 'y': None},
    {'x': ['a', 'b'], 'y': [1, 2]},
    {'x': [[1, 2], [3, 4]], 'y': [[1, 2], [3, 4]]},
    ([1, 2], [1, 2], [1, 2]),
    42,
])
def test_bad_data(raw):
    with pytest.raises(InvalidData):
        compat_data(raw)

def test_result_legacy_keys():
    result = Result(parameter_values=np.array([1., 2.]), residuals=0.5,
                    iterations=3, parameter_error=0.5, converged=True)
    assert compat_result(result) is result
    np.testing.assert_array_equal(result['parameterValues'], [1, 2])
    assert result['parameterError'] == 0.5
    assert result['residuals'] == 0.5
    assert result['iterations'] == 3
    assert result[2] == 3
    with pytest.raises(KeyError):
        result['count']
    assert 'converged' in str(result)

def test_compat_result_rejects_other_types():
    with pytest.raises(TypeError):
        compat_result({'parameterValues': [1]})

def test_legacy_fit_call():
    xs = np.linspace(0, 1, 11)
    result = fit({'x': xs, 'y': 4*xs + 2}, line,
                 {'initialValues': [0, 0], 'maxIterations': 50, 'residualEpsilon': 1e-12})
    np.testing.assert_allclose(result['parameterValues'], [4, 2], atol=1e-5)
    assert result['parameterError'] == result.residuals
