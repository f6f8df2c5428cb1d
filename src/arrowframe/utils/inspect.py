"""Provide insights about Python objects.

Mostly used to give a readable name to the compute
functions used by expressions, so that query plans
can be printed and explained.
"""

import functools
import inspect
from typing import Any


def get_qualname(obj: Any) -> str:
    """Get the qualified name of the given object.

    For functions this will return something like
    ``module.function``, for bound methods
    ``module.class.method``.

    >>> import pyarrow.compute as pc
    >>> get_qualname(pc.pairwise_diff)
    'pyarrow.compute.pairwise_diff'
    >>> get_qualname(functools.partial(pc.sum, min_count=0))
    'pyarrow.compute.sum[min_count=0]'
    """
    if isinstance(obj, functools.partial):
        options = ",".join(f"{k}={v!r}" for k, v in obj.keywords.items())
        return f"{get_qualname(obj.func)}[{options}]"

    if inspect.ismodule(obj):
        return obj.__name__

    module = _module_name(obj)
    if inspect.ismethod(obj):
        return f"{module}.{obj.__self__.__class__.__name__}.{obj.__name__}"
    if inspect.isfunction(obj) or inspect.isbuiltin(obj) or inspect.isclass(obj):
        return f"{module}.{getattr(obj, '__qualname__', obj.__name__)}"
    if callable(obj) and hasattr(obj, "__name__"):
        # pyarrow.compute functions are generated wrappers,
        # they expose a name but are not plain functions.
        return f"{module}.{obj.__name__}"
    return f"{module}.{obj.__class__.__name__}"


def _module_name(obj: Any) -> str:
    module = getattr(obj, "__module__", None)
    if module is None:
        found = inspect.getmodule(obj)
        module = found.__name__ if found is not None else "<unknown>"
    return module
