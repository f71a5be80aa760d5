"""
Eigenvalue Solver Result Types

Standardized result containers for eigenvalue computations.
"""

import numpy as np
import scipy.sparse as sp
from typing import Optional, NamedTuple
from numpy.typing import NDArray

class EigenSolver:
    """
    Marker class for eigenvalue solver types.
    """

    @staticmethod
    def _is_hermitian(A, tol=1e-12):
        """
        Check if A is symmetric/Hermitian, works for dense and sparse.

        Same test for both storages: max|A - A^H| <= tol * max(1, max|A|).
        """
        if sp.issparse(A):
            diff    = (A - A.T.conjugate()).tocoo()
            skew    = float(np.max(np.abs(diff.data))) if diff.nnz else 0.0
            data    = A.tocoo().data
            scale   = float(np.max(np.abs(data))) if data.size else 0.0
        else:
            A       = np.asarray(A)
            skew    = float(np.max(np.abs(A - A.T.conj()))) if A.size else 0.0
            scale   = float(np.max(np.abs(A))) if A.size else 0.0
        return skew <= tol * max(1.0, scale)

    @staticmethod
    def is_iterative_solver() -> bool:
        """Indicate if the solver is iterative."""
        return False

    # ----------------------------------------------------------------------------

    def solve(self, *args, **kwargs) -> 'EigenResult':
        """
        Solve the eigenvalue problem.

        Returns:
            EigenResult: Standardized result container.
        """
        raise NotImplementedError("This method should be implemented by subclasses.")

# ---------------------------------------------------------------------------------

class EigenResult(NamedTuple):
    r"""
    Standardized result from eigenvalue solvers.

    Index 0 always holds the eigenpair most relevant to the selection criterion
    (the largest value for 'LA', the smallest for 'SA', ...).

    Attributes:
        eigenvalues:
            Computed eigenvalues, most relevant first
        eigenvectors:
            Corresponding eigenvectors as columns, shape (n, len(eigenvalues))
        iterations:
            Number of reverse-communication calls (None for direct methods)
        converged:
            Whether all requested eigenpairs converged
        residual_norms:
            Error estimates of ||A v - \lambda v|| for each eigenpair (optional)
        info:
            Status of the iteration: 0 - normal exit, 1 - iteration limit reached
            with a partial set of converged eigenpairs
    """
    eigenvalues     : NDArray
    eigenvectors    : NDArray
    iterations      : Optional[int]     = None
    converged       : bool              = True
    residual_norms  : Optional[NDArray] = None
    info            : int               = 0

    def __repr__(self):
        n_eigs      = len(self.eigenvalues) if self.eigenvalues is not None else 0
        iter_str    = f"{self.iterations}" if self.iterations is not None else "N/A"
        return (f"EigenResult(n_eigenvalues={n_eigs}, "
                f"converged={self.converged}, iterations={iter_str}, info={self.info})")

    def __str__(self):
        return f'converged={self.converged}, iterations={self.iterations}'

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
