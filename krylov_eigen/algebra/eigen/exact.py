"""
Exact Diagonalization (Full Eigenvalue Decomposition)

Dense reference solver for real symmetric operators. All eigenpairs are computed
with `scipy.linalg.eigh` and, when a criterion is given, the wanted ones are
returned in the same order as the iterative driver (most relevant first), so the
two can be compared entry by entry.

Mathematical Background:
    For symmetric A: A = Q Λ Q^T with orthogonal Q.

References:
    - Golub & Van Loan, "Matrix Computations" (4th ed.), Chapter 8
"""

from typing import Optional, Union
from numpy.typing import NDArray
import numpy as np
import scipy.linalg as scipy_linalg
import scipy.sparse as sp

from .errors import EigenErrorMsg, ShapeError, SymmetryError
from .operator import MatrixOperator, FunctionOperator, as_operator
from .params import Criterion
from .irlm import relevance_order
from .result import EigenResult, EigenSolver

# ----------------------------------------------------------------------------------------

def _dense(A) -> NDArray:
    '''Dense copy of an explicit matrix or of any operator (column by column).'''
    if isinstance(A, MatrixOperator):
        A = A.A
    if sp.issparse(A):
        return A.toarray()
    if isinstance(A, np.ndarray):
        return np.asarray(A)
    op          = as_operator(A)
    n           = op.dimension()
    dense       = np.empty((n, n), dtype=np.float64)
    unit        = np.zeros(n, dtype=np.float64)
    for j in range(n):
        unit[j]     = 1.0
        dense[:, j] = op.multiply(unit)
        unit[j]     = 0.0
    return dense

def full_diagonalization(A, which: Optional[Union[Criterion, str]] = None, k: Optional[int] = None) -> EigenResult:
    '''
    All (or the k wanted) eigenpairs of a real symmetric matrix.

    Args:
        A:
            Matrix or operator, densified if needed.
        which:
            Criterion of the wanted pairs. None returns the full spectrum ascending.
        k:
            Number of wanted pairs (default: all of them).

    Returns:
        EigenResult, ordered as the IRLM driver orders it for the same criterion.
    '''
    if isinstance(A, (list, tuple)):
        A = np.asarray(A)
    dense = _dense(A)
    if dense.ndim != 2 or dense.shape[0] != dense.shape[1]:
        raise ShapeError(EigenErrorMsg.NOT_SQUARE, f"Operator is not square: {dense.shape}")
    if not EigenSolver._is_hermitian(dense):
        raise SymmetryError(EigenErrorMsg.NOT_SYMMETRIC, "Operator is not symmetric")

    eigenvalues, eigenvectors = scipy_linalg.eigh(dense)

    if which is not None:
        criterion       = Criterion.parse(which)
        count           = eigenvalues.shape[0] if k is None else int(k)
        idx             = relevance_order(eigenvalues, criterion, count)[::-1]
        eigenvalues     = eigenvalues[idx]
        eigenvectors    = eigenvectors[:, idx]
    elif k is not None:
        eigenvalues     = eigenvalues[:k]
        eigenvectors    = eigenvectors[:, :k]

    residual_norms = np.linalg.norm(dense @ eigenvectors - eigenvectors * eigenvalues, axis=0)
    return EigenResult(
        eigenvalues     = eigenvalues,
        eigenvectors    = eigenvectors,
        iterations      = 1,  # Direct method
        converged       = True,
        residual_norms  = residual_norms,
    )

# ----------------------------------------------------------------------------------------
#! Exact Eigensolver Class
# ----------------------------------------------------------------------------------------

class ExactEigensolver(EigenSolver):
    """
    Full eigenvalue decomposition with SciPy.

    Args:
        k: Number of eigenpairs to return (default: all)
        which: Criterion used to select and order them (default: full spectrum, ascending)

    Example:
        >>> A = np.array([[4., -1.], [-1., 3.]])
        >>> result = ExactEigensolver().solve(A)
        >>> print(f"All eigenvalues: {result.eigenvalues}")
    """

    def __init__(self, k: Optional[int] = None, which: Optional[Union[Criterion, str]] = None):
        self.k      = k
        self.which  = which

    def solve(self, A=None, matvec=None, n: Optional[int] = None, *, k: Optional[int] = None, which=None) -> EigenResult:
        """
        Solve for the eigenvalues and eigenvectors of A (or of the operator given by matvec).
        """
        if A is None:
            if matvec is None or n is None:
                raise ValueError("Either A or (matvec, n) must be provided")
            A = FunctionOperator(matvec, n)
        return full_diagonalization(A,
                    which   = self.which if which is None else which,
                    k       = self.k if k is None else k)

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
