"""
Linear algebra subpackage.

Holds the eigensolvers (`krylov_eigen.algebra.eigen`). The subpackage is
loaded lazily, so importing `krylov_eigen.algebra` costs nothing until an
attribute is accessed.
"""

from typing import TYPE_CHECKING
import importlib

# -----------------------------------------------------------------------------------------------
# Lazy Import Configuration
# -----------------------------------------------------------------------------------------------

# Mapping of attribute names to their module paths and actual attribute names
_LAZY_IMPORTS = {
    'eigen'                 : ('.eigen', None),  # None means import the whole module
    'get_logger'            : ('..common.flog', 'get_global_logger'),
}

# Cache for lazily loaded modules/attributes
_LAZY_CACHE = {}

if TYPE_CHECKING:
    from . import eigen
    from ..common.flog import get_global_logger as get_logger

# -----------------------------------------------------------------------------------------------

def __getattr__(name: str):
    """
    Module-level __getattr__ for lazy imports (PEP 562).
    """
    if name in _LAZY_CACHE:
        return _LAZY_CACHE[name]

    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_path, attr_name = _LAZY_IMPORTS[name]
    module = importlib.import_module(module_path, package=__name__)
    result = module if attr_name is None else getattr(module, attr_name)

    _LAZY_CACHE[name] = result
    return result

def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))

__all__ = list(_LAZY_IMPORTS.keys())

# -----------------------------------------------------------------------------------------------
#! EOF
# -----------------------------------------------------------------------------------------------
