import matplotlib
import numpy as np
import pytest

matplotlib.use('Agg')

from models import sine, bennet5


@pytest.fixture
def sine_data():
    xs = np.linspace(0, 2*np.pi, 50)
    return {'x': xs, 'y': np.array([sine([2, 3])(t) for t in xs])}

@pytest.fixture
def bennet5_data():
    xs = np.linspace(-2.9, 53, 154)
    return {'x': xs, 'y': np.array([bennet5([2, 3, 5])(t) for t in xs])}

@pytest.fixture
def four_param_data():
    return {
        'x': [9.22e-12, 5.53e-11, 3.32e-10, 1.99e-9, 1.19e-8,
              7.17e-8, 4.3e-7, 0.00000258, 0.0000155, 0.0000929],
        'y': [7.807, -3.74, 21.119, 2.382, 4.269,
              41.57, 73.401, 98.535, 97.059, 92.147],
    }

@pytest.fixture
def line_data():
    xs = np.linspace(-5, 5, 21)
    return {'x': xs, 'y': 0.5*xs - 2}
