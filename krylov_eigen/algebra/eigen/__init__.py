"""
Eigenvalue Solvers Module

Implicitly Restarted Lanczos driver for a few extremal eigenpairs of large real
symmetric operators, known only through matrix-vector products.

Available Solvers:
    - eigen / ArpackEigensolver : IRLM driver (reverse communication, ARPACK conventions)
    - ImplicitLanczos           : the reverse-communication primitive driven by `eigen`
    - Exact Diagonalization     : dense reference for small systems

Driver stages:
    - prepare, iterate, check_status, extract

Factory Function:
    - choose_eigensolver: Unified interface for the solvers
    - decide_method: Method picked by 'auto' from the problem size

Standard Result:
    - EigenResult: Standardized return type (eigenvalues, eigenvectors, iterations, converged)

This module uses lazy imports to minimize startup overhead.
"""

from typing import TYPE_CHECKING
import importlib

# -----------------------------------------------------------------------------------------------
# Lazy Import Configuration
# -----------------------------------------------------------------------------------------------

_LAZY_IMPORTS = {
    # IRLM driver
    'eigen'                         : ('.arpack', 'eigen'),
    'prepare'                       : ('.arpack', 'prepare'),
    'iterate'                       : ('.arpack', 'iterate'),
    'check_status'                  : ('.arpack', 'check_status'),
    'extract'                       : ('.arpack', 'extract'),
    'ArpackEigensolver'             : ('.arpack', 'ArpackEigensolver'),
    # Reverse-communication primitive
    'ImplicitLanczos'               : ('.irlm', 'ImplicitLanczos'),
    'ReverseCommunicationSolver'    : ('.irlm', 'ReverseCommunicationSolver'),
    'relevance_order'               : ('.irlm', 'relevance_order'),
    # Parameters and state
    'Criterion'                     : ('.params', 'Criterion'),
    'Signal'                        : ('.params', 'Signal'),
    'ParameterBlock'                : ('.params', 'ParameterBlock'),
    'PointerBlock'                  : ('.params', 'PointerBlock'),
    'IterationState'                : ('.params', 'IterationState'),
    # Operators
    'Operator'                      : ('.operator', 'Operator'),
    'MatrixOperator'                : ('.operator', 'MatrixOperator'),
    'FunctionOperator'              : ('.operator', 'FunctionOperator'),
    'as_operator'                   : ('.operator', 'as_operator'),
    # Errors
    'errors'                        : ('.errors', None),
    'EigenError'                    : ('.errors', 'EigenError'),
    'ShapeError'                    : ('.errors', 'ShapeError'),
    'SymmetryError'                 : ('.errors', 'SymmetryError'),
    'InvalidArgument'               : ('.errors', 'InvalidArgument'),
    'ProtocolError'                 : ('.errors', 'ProtocolError'),
    'SolverError'                   : ('.errors', 'SolverError'),
    # Exact diagonalization
    'ExactEigensolver'              : ('.exact', 'ExactEigensolver'),
    'full_diagonalization'          : ('.exact', 'full_diagonalization'),
    # Factory interface
    'choose_eigensolver'            : ('.factory', 'choose_eigensolver'),
    'decide_method'                 : ('.factory', 'decide_method'),
    # Result type
    'EigenResult'                   : ('.result', 'EigenResult'),
}

_LAZY_CACHE = {}

# For type checking only
if TYPE_CHECKING:
    from .arpack        import eigen, prepare, iterate, check_status, extract, ArpackEigensolver
    from .irlm          import ImplicitLanczos, ReverseCommunicationSolver, relevance_order
    from .params        import Criterion, Signal, ParameterBlock, PointerBlock, IterationState
    from .operator      import Operator, MatrixOperator, FunctionOperator, as_operator
    from .errors        import EigenError, ShapeError, SymmetryError, InvalidArgument, ProtocolError, SolverError
    from .exact         import ExactEigensolver, full_diagonalization
    from .factory       import choose_eigensolver, decide_method
    from .result        import EigenResult
    from .              import errors

# -----------------------------------------------------------------------------------------------

def __getattr__(name: str):
    """
    Module-level __getattr__ for lazy imports.
    """
    if name in _LAZY_CACHE:
        return _LAZY_CACHE[name]

    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_path, attr_name = _LAZY_IMPORTS[name]
    module = importlib.import_module(module_path, package=__name__)

    if attr_name is None:
        result = module
    else:
        result = getattr(module, attr_name)

    _LAZY_CACHE[name] = result
    return result

def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))

__all__ = list(_LAZY_IMPORTS.keys())

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
