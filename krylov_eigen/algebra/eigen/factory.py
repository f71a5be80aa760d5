"""
Unified Eigenvalue Solver Interface

Factory choosing between the implicitly restarted Lanczos driver and the dense
reference diagonalization, from the method name or from the problem size.

----------------------------------------------
File        : krylov_eigen/algebra/eigen/factory.py
----------------------------------------------
"""

import numpy as np
import scipy.sparse as sp
from numpy.typing import NDArray
from typing import Optional, Callable, Literal, Union

from .result    import EigenResult
from .params    import Criterion
from .operator  import FunctionOperator
from .exact     import ExactEigensolver
from .arpack    import ArpackEigensolver

# ----------------------------------------------------------------------------------------

# explicit matrices up to this size are diagonalized densely by 'auto'
AUTO_EXACT_LIMIT = 256

def decide_method(n: int, explicit: bool = True, k: Optional[int] = None) -> str:
    '''
    Method picked by 'auto': 'exact' for small explicit matrices, 'irlm' otherwise.

    Args:
        n:
            Dimension of the problem.
        explicit:
            Whether the operator is an explicit (dense or sparse) matrix.
        k:
            Number of wanted eigenpairs. A request for the whole spectrum
            (k >= n) can only be served by the dense solver.
    '''
    if explicit and (n <= AUTO_EXACT_LIMIT or (k is not None and k >= n)):
        return 'exact'
    return 'irlm'

# ----------------------------------------------------------------------------------------
#! Unified Eigenvalue Solver Factory Function
# ----------------------------------------------------------------------------------------

def choose_eigensolver(
        method          : Literal['irlm', 'exact', 'auto']          = 'auto',
        A               : Optional[NDArray]                         = None,
        matvec          : Optional[Callable[[NDArray], NDArray]]    = None,
        n               : Optional[int]                             = None,
        k               : int                                       = 6,
        which           : Union[Criterion, str]                     = 'SA',
        **kwargs) -> EigenResult:
    r"""
    Unified interface for the eigenvalue solvers.

    Parameters:
    -----------
        method: Which solver to use
            - 'irlm'    : Implicitly restarted Lanczos (real symmetric, k < n)
            - 'exact'   : Full diagonalization, the k wanted pairs are returned
            - 'auto'    : 'exact' for explicit matrices with n <= 256, else 'irlm'
        A :
            Matrix or operator to diagonalize (optional if matvec provided)
        matvec :
            Matrix-vector product function (optional if A provided)
        n :
            Dimension of problem (required if matvec provided without A)
        k :
            Number of eigenvalues to compute
        which:
            'LA', 'SA', 'LM', 'SM', 'BE' (or 'largest', 'smallest', 'both')
        **kwargs: Additional arguments passed to the IRLM solver
            - tol           : float - Convergence tolerance
            - max_iter      : int - Maximum reverse-communication passes
            - max_restarts  : int - Maximum implicit restarts
            - seed          : int - Seed of the starting vector
            - v0            : starting vector
            - logger, verbose

    Returns:
        EigenResult with the most relevant eigenpair first

    Examples:
        >>> A = np.random.randn(100, 100)
        >>> A = 0.5 * (A + A.T)
        >>> result = choose_eigensolver('exact', A, k=4, which='SA')
        >>> result = choose_eigensolver('irlm', A, k=4, which='LA', seed=1)
    """

    if A is None and matvec is None:
        raise ValueError("Must provide either matrix A or matvec function")
    if A is None:
        if n is None:
            raise ValueError("Must provide dimension n when using matvec without A")
        A = FunctionOperator(matvec, n)
    elif isinstance(A, (list, tuple)):
        A = np.asarray(A)
    n = A.shape[0]

    if method == 'auto':
        explicit    = sp.issparse(A) or isinstance(A, np.ndarray)
        method      = decide_method(n, explicit=explicit, k=k)

    # ----------------------------------------------

    if method == 'exact':
        return ExactEigensolver(k=k, which=which).solve(A)

    if method == 'irlm':
        v0      = kwargs.pop('v0', None)
        seed    = kwargs.pop('seed', None)
        solver  = ArpackEigensolver(k=k, which=which, **kwargs)
        return solver.solve(A, v0=v0, seed=seed)

    raise ValueError(f"Unknown method: {method}. Use 'irlm', 'exact' or 'auto'.")

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
