# krylov_eigen/__init__.py

"""
krylov_eigen - a few extremal eigenpairs of large real symmetric operators.

The Implicitly Restarted Lanczos Method (IRLM) is driven through a
reverse-communication loop with the ARPACK calling conventions: the operator is
only ever asked for matrix-vector products.

Modules:
--------
- algebra   : eigensolvers (IRLM driver, reverse-communication primitive, exact reference)
- common    : logging

Examples:
---------
>>> import numpy as np
>>> import krylov_eigen as ke
>>> A = np.diag(np.arange(1.0, 101.0))
>>> result = ke.eigen(A, k=3, which='LA')
>>> result.eigenvalues
array([100.,  99.,  98.])

File    : krylov_eigen/__init__.py
Version : 0.1.0
License : MIT
"""

import importlib

# Package metadata
__version__         = "0.1.0"
__license__         = "MIT"

MODULE_DESCRIPTION  = "Implicitly restarted Lanczos eigensolver for real symmetric operators."

# List of available modules (not imported by default)
__all__             = ["algebra", "common", "eigen", "EigenResult"]

def get_module_description(module_name):
    """
    Get the description of a specific module in the krylov_eigen package.

    Parameters
    ----------
    module_name : str
        The name of the module.

    Returns
    -------
    str
        The description of the module.
    """
    descriptions = {
        "algebra"   : "Eigensolvers: IRLM driver, reverse-communication primitive and exact reference.",
        "common"    : "Logging utilities.",
    }
    return descriptions.get(module_name, "Module not found.")

def list_available_modules():
    """
    List the subpackages of krylov_eigen.
    """
    return ["algebra", "common"]

# Lazy import subpackages on attribute access (PEP 562)
def __getattr__(name):  # pragma: no cover - simple indirection
    # Convenience aliases
    if name in ("eigen", "EigenResult"):
        return getattr(importlib.import_module(".algebra.eigen", __name__), name)
    if name in list_available_modules():
        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

def __dir__():  # pragma: no cover
    return sorted(list(globals().keys()) + __all__)

# ---------------------------------------------------------------------
#! EOF
# ---------------------------------------------------------------------
