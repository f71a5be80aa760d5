"""
Linear operators consumed by the iterative eigensolvers.

The drivers never look inside an operator: they ask for its shape, its dtype,
whether it is symmetric and for products y = A x. Anything implementing
`Operator` can be diagonalized, explicit matrices (dense or scipy.sparse) and
matrix-free callables are wrapped here.

file    : krylov_eigen/algebra/eigen/operator.py
"""

from typing import Callable, Optional, Protocol, Tuple, runtime_checkable

import numpy as np
import scipy.sparse as sp
from numpy.typing import NDArray
from scipy.sparse.linalg import LinearOperator

from .result import EigenSolver

# ----------------------------------------------------------------------------------------
#! Protocol
# ----------------------------------------------------------------------------------------

@runtime_checkable
class Operator(Protocol):
    '''
    Square linear map known through its action on vectors.
    '''

    @property
    def shape(self) -> Tuple[int, int]: ...

    @property
    def dtype(self) -> np.dtype: ...

    def dimension(self) -> int: ...

    def is_symmetric(self) -> bool: ...

    def multiply(self, x: NDArray) -> NDArray: ...

# ----------------------------------------------------------------------------------------
#! Explicit matrices
# ----------------------------------------------------------------------------------------

class MatrixOperator:
    '''
    Dense numpy array or scipy.sparse matrix.

    Parameters:
    -----------
        A:
            The matrix, any shape (non-square matrices are rejected by the drivers).
        atol:
            Absolute tolerance of the symmetry check A == A^T.
    '''

    def __init__(self, A, atol: float = 1e-12):
        if not sp.issparse(A):
            A = np.asarray(A)
            if A.ndim != 2:
                raise ValueError(f"A must be a 2D matrix, got {A.ndim} dimensions")
        self.A          = A
        self.atol       = atol
        self._symmetric = None

    @property
    def shape(self) -> Tuple[int, int]:
        return tuple(self.A.shape)

    @property
    def dtype(self) -> np.dtype:
        return self.A.dtype

    def dimension(self) -> int:
        return self.A.shape[0]

    def is_symmetric(self) -> bool:
        '''Numerical check, cached after the first call.'''
        if self._symmetric is None:
            nrow, ncol = self.A.shape
            self._symmetric = nrow == ncol and EigenSolver._is_hermitian(self.A, tol=self.atol)
        return self._symmetric

    def multiply(self, x: NDArray) -> NDArray:
        return np.asarray(self.A @ x).reshape(-1)

    def __repr__(self):
        kind = 'sparse' if sp.issparse(self.A) else 'dense'
        return f"MatrixOperator({kind}, shape={self.shape})"

# ----------------------------------------------------------------------------------------
#! Matrix-free operators
# ----------------------------------------------------------------------------------------

class FunctionOperator:
    '''
    Operator given by a matrix-vector product function.

    Symmetry cannot be verified without forming the matrix, the caller asserts it.

    Parameters:
    -----------
        matvec:
            Function computing A @ x for a vector of length `ncol`.
        n:
            Number of rows.
        symmetric:
            Whether the caller guarantees A == A^T.
        ncol:
            Number of columns (default: n).
        dtype:
            Scalar type of the products.
    '''

    def __init__(self,
                matvec      : Callable[[NDArray], NDArray],
                n           : int,
                symmetric   : bool                  = True,
                ncol        : Optional[int]         = None,
                dtype       : np.dtype              = np.float64):
        self.matvec     = matvec
        self.n          = int(n)
        self.ncol       = int(ncol) if ncol is not None else self.n
        self.symmetric  = symmetric
        self._dtype     = np.dtype(dtype)

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.n, self.ncol)

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    def dimension(self) -> int:
        return self.n

    def is_symmetric(self) -> bool:
        return bool(self.symmetric)

    def multiply(self, x: NDArray) -> NDArray:
        return np.asarray(self.matvec(x)).reshape(-1)

    def __repr__(self):
        return f"FunctionOperator(shape={self.shape}, symmetric={self.symmetric})"

# ----------------------------------------------------------------------------------------

def as_operator(A, symmetric: Optional[bool] = None) -> Operator:
    '''
    Wrap `A` into an Operator.

    Args:
        A:
            An Operator, a numpy array, a scipy.sparse matrix or a
            scipy.sparse.linalg.LinearOperator.
        symmetric:
            Symmetry assertion for a LinearOperator (default: True, it cannot be checked).
            Ignored for explicit matrices, which are checked numerically.
    '''
    if isinstance(A, (MatrixOperator, FunctionOperator)):
        return A
    if isinstance(A, LinearOperator):
        nrow, ncol = A.shape
        return FunctionOperator(A.matvec, nrow,
                        symmetric   = True if symmetric is None else symmetric,
                        ncol        = ncol,
                        dtype       = A.dtype if A.dtype is not None else np.float64)
    if sp.issparse(A) or isinstance(A, (np.ndarray, list, tuple)):
        return MatrixOperator(A)
    if isinstance(A, Operator):
        return A
    raise TypeError(f"Cannot interpret {type(A).__name__} as a linear operator")

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
