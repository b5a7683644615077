"""An *adapter* translates what the caller passes to :func:`lmcurve.fit()`
into the canonical form used by the optimizer, and back.

Older releases of this library followed the naming of the JavaScript package
it was ported from: options were given in camelCase (``initialValues``,
``dampingBoost`` ...), the data came as a dict with ``xError``/``yError``
keys and the result was read as ``result['parameterValues']``. Even older
releases called the convergence threshold ``errorTolerance``.

All of these spellings are still accepted:

    - :func:`compat_options` turns a mapping of (possibly legacy) option names
      into a dict of canonical option names.
    - :func:`compat_data` turns a mapping, an `(x, y)` pair or a
      :class:`Dataset` into a :class:`Dataset`.
    - :func:`compat_result` prepares the :class:`Result` handed back to the
      caller. :class:`Result` answers the legacy keys itself, so this is a
      pass-through.

"""

import re
import warnings
from collections.abc import Mapping

from .errors import InvalidData, InvalidOption
from .parameters import Dataset, Options, Result

# Names that were renamed, rather than just re-spelled
_RENAMED_OPTIONS = {
    'errorTolerance': 'residual_epsilon',
}

_DEPRECATED_OPTIONS = {'errorTolerance'}

_DATA_KEYS = {
    'x': 'x',
    'y': 'y',
    'xError': 'x_error',
    'x_error': 'x_error',
    'yError': 'y_error',
    'y_error': 'y_error',
}

def snake_case(name):
    """Convert a camelCase option name to snake_case"""
    return re.sub(r'(?<=[a-z0-9])([A-Z])', r'_\1', name).lower()

def canonical_option_name(name):
    """Return the canonical option name for `name`, or raise `InvalidOption`."""
    if name in _RENAMED_OPTIONS:
        canonical = _RENAMED_OPTIONS[name]
    else:
        canonical = snake_case(name)

    if canonical not in Options._fields:
        raise InvalidOption(f"Unknown option '{name}'")
    return canonical

def compat_options(raw):
    """Translate a mapping of options into a dict with canonical names.

    `None` is treated as no options at all. Giving the same option twice
    under different spellings is an error.
    """
    if raw is None:
        return {}
    if isinstance(raw, Options):
        return raw._asdict()
    if not isinstance(raw, Mapping):
        raise InvalidOption(f"Options must be a mapping, not {type(raw).__name__}")

    options = {}
    given_as = {}
    for name, value in raw.items():
        canonical = canonical_option_name(name)
        if canonical in options:
            raise InvalidOption(f"Option '{canonical}' was given twice,"
                                f" as '{given_as[canonical]}' and as '{name}'")
        if name in _DEPRECATED_OPTIONS:
            warnings.warn(f"The '{name}' option is deprecated, use '{canonical}' instead",
                          DeprecationWarning, stacklevel=3)
        options[canonical] = value
        given_as[canonical] = name

    return options

def compat_data(raw):
    """Turn the `data` argument of :func:`lmcurve.fit()` into a :class:`Dataset`."""
    if isinstance(raw, Dataset):
        return raw
    if raw is None:
        raise InvalidData("The data object must have x and y elements")

    if isinstance(raw, Mapping):
        fields = {}
        for key, value in raw.items():
            if key not in _DATA_KEYS:
                raise InvalidData(f"Unknown data key '{key}'")
            field = _DATA_KEYS[key]
            if field in fields:
                raise InvalidData(f"'{field}' was given twice")
            fields[field] = value
        if fields.get('x') is None or fields.get('y') is None:
            raise InvalidData("The data object must have x and y elements")
        return Dataset(**fields)

    try:
        x, y = raw
    except (TypeError, ValueError):
        raise InvalidData("The data must be a mapping with x and y elements"
                          " or an (x, y) pair") from None
    return Dataset(x, y)

def compat_result(result):
    """Prepare `result` for the caller. :class:`Result` supports the legacy keys."""
    if not isinstance(result, Result):
        raise TypeError(f"Expected a Result, got {type(result).__name__}")
    return result
