r"""
ARPACK-style driver of the Implicitly Restarted Lanczos Method.

Computes a few extremal eigenpairs of a real symmetric operator known only through
its action y = A x. The heavy lifting is done by a reverse-communication primitive
(by default `ImplicitLanczos`), this module owns everything around it:

    1. prepare      : validate the request, size and allocate the workspace
    2. iterate      : run the reverse-communication loop, feeding the primitive
                      with operator products
    3. check_status : interpret the final status code
    4. extract      : fetch the converged Ritz pairs and put the most relevant first

Ordering of the result (index 0 is the most relevant pair):
    - 'LA' : descending
    - 'SA' : ascending
    - 'LM' : descending in |lambda|
    - 'SM' : ascending in |lambda|
    - 'BE' : the upper k - k//2 values descending, then the lower k//2 ascending

Example:
    >>> A = np.diag(np.arange(1.0, 101.0))
    >>> result = eigen(A, k=3, which='LA')
    >>> result.eigenvalues
    array([100., 99., 98.])

file    : krylov_eigen/algebra/eigen/arpack.py
"""

from typing import Callable, Optional, Tuple, Union, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from .errors import (
    EigenErrorMsg, ShapeError, SymmetryError, InvalidArgument, ProtocolError, SolverError
)
from .params import (
    Criterion, Signal, MULTIPLY_SIGNALS, IterationState, EPSILON, DEFAULT_TOL, DEFAULT_MAX_RESTARTS
)
from .operator import Operator, FunctionOperator, as_operator
from .irlm import ImplicitLanczos, ReverseCommunicationSolver
from .result import EigenResult, EigenSolver

if TYPE_CHECKING:
    from ...common.flog import Logger

# ----------------------------------------------------------------------------------------
#! Helpers
# ----------------------------------------------------------------------------------------

def _get_logger(logger: Optional['Logger']) -> 'Logger':
    if logger is not None:
        return logger
    from ...common.flog import get_global_logger
    return get_global_logger()

def _is_integer(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))

# ----------------------------------------------------------------------------------------
#! Preparation
# ----------------------------------------------------------------------------------------

def prepare(A               : Operator,
            k               : int,
            which           : Union[Criterion, str],
            tol             : float             = DEFAULT_TOL,
            max_iter        : Optional[int]     = None,
            *,
            v0              : Optional[NDArray] = None,
            seed            : Optional[int]     = None,
            max_restarts    : int               = DEFAULT_MAX_RESTARTS) -> Tuple[IterationState, int]:
    '''
    Validate a request and allocate its workspace.

    Nothing is multiplied here, the operator is only asked for its shape, its
    dtype and its symmetry.

    Returns:
        (state, max_iter) with max_iter = 10 n when not given or not positive.

    Raises:
        ShapeError:
            A is not square.
        SymmetryError:
            A is not symmetric.
        InvalidArgument:
            complex operator, unknown criterion, k outside (0, n), tol <= machine
            epsilon, a starting vector of the wrong length or a non-integer max_iter.
    '''
    nrow, ncol = A.shape
    if nrow != ncol:
        raise ShapeError(EigenErrorMsg.NOT_SQUARE, f"Operator is not square: {nrow} x {ncol}")
    n = int(nrow)

    if not A.is_symmetric():
        raise SymmetryError(EigenErrorMsg.NOT_SYMMETRIC, "Operator is not symmetric")

    if np.issubdtype(np.dtype(A.dtype), np.complexfloating):
        raise InvalidArgument(EigenErrorMsg.NOT_REAL, f"Only real operators are supported, got {A.dtype}")

    try:
        criterion = Criterion.parse(which)
    except ValueError as e:
        raise InvalidArgument(EigenErrorMsg.INVALID_CRITERION, str(e)) from e

    if not _is_integer(k) or k <= 0 or k >= n:
        raise InvalidArgument(EigenErrorMsg.INVALID_NEV, f"Invalid NEV parameter k: {k!r} (need 0 < k < {n})")
    k = int(k)

    try:
        tol = float(tol)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(EigenErrorMsg.INVALID_TOLERANCE, f"Invalid tolerance: {tol!r}") from e
    if not tol > EPSILON:
        raise InvalidArgument(EigenErrorMsg.INVALID_TOLERANCE, f"Invalid tolerance: tol = {tol} <= {EPSILON}")

    if v0 is not None:
        if np.iscomplexobj(v0):
            raise InvalidArgument(EigenErrorMsg.INVALID_START, "Starting vector must be real")
        v0 = np.asarray(v0, dtype=np.float64).reshape(-1)
        if v0.shape[0] != n:
            raise InvalidArgument(EigenErrorMsg.INVALID_START,
                            f"Starting vector has length {v0.shape[0]}, expected {n}")

    if max_iter is not None and not _is_integer(max_iter):
        raise InvalidArgument(EigenErrorMsg.INVALID_MAXITER, f"Invalid iteration budget: max_iter = {max_iter!r}")
    if max_iter is None or max_iter <= 0:
        max_iter = 10 * n

    ncv     = min(3 * k, n)
    state   = IterationState.allocate(n, k, ncv, criterion, tol,
                    max_restarts    = max_restarts,
                    v0              = v0,
                    seed            = seed)
    return state, int(max_iter)

# ----------------------------------------------------------------------------------------
#! Reverse-communication loop
# ----------------------------------------------------------------------------------------

def _multiply(A: Operator, state: IterationState):
    '''workd[output] = A @ workd[input], with the offsets checked.'''
    n           = state.n
    p           = state.pointers
    size        = state.workd.shape[0]
    src, dst    = int(p.input_offset), int(p.output_offset)

    if min(src, dst) < 0 or max(src, dst) + n > size:
        raise ProtocolError(EigenErrorMsg.BAD_OFFSETS,
                    f"Offsets (input={src}, output={dst}) exceed the communication buffer of length {size}",
                    signal=state.signal)
    if abs(src - dst) < n:
        raise ProtocolError(EigenErrorMsg.BAD_OFFSETS,
                    f"Input and output regions overlap (input={src}, output={dst}, n={n})",
                    signal=state.signal)

    y = np.asarray(A.multiply(state.workd[src:src + n].copy())).reshape(-1)
    if y.shape[0] != n:
        raise ProtocolError(EigenErrorMsg.BAD_OFFSETS,
                    f"Operator returned a vector of length {y.shape[0]}, expected {n}",
                    signal=state.signal)
    state.workd[dst:dst + n] = y

def iterate(A           : Operator,
            state       : IterationState,
            primitive   : ReverseCommunicationSolver,
            max_iter    : int,
            logger      : Optional['Logger']    = None,
            verbose     : bool                  = True) -> int:
    '''
    Drive the primitive until it signals DONE or `max_iter` passes are completed.

    Returns:
        The number of completed passes (operator products).

    Raises:
        ProtocolError:
            the primitive asked for anything but a product with A, or placed the
            vectors outside the communication buffer.
    '''
    iterations = 0
    while iterations < max_iter:
        signal          = primitive.advance(state)
        state.signal    = signal
        if signal == Signal.DONE:
            break
        if signal not in MULTIPLY_SIGNALS:
            raise ProtocolError(EigenErrorMsg.UNSUPPORTED_SIGNAL,
                        f"Unsupported reverse-communication signal: {int(signal)}",
                        signal=int(signal))
        _multiply(A, state)
        iterations += 1

    _get_logger(logger).info(f"IRLM: {iterations} iterations for operator of size {state.n}", lvl=1, verbose=verbose)
    return iterations

# ----------------------------------------------------------------------------------------
#! Status
# ----------------------------------------------------------------------------------------

def check_status(state: IterationState, logger: Optional['Logger'] = None, verbose: bool = True):
    '''
    0 passes, 1 passes with a notice (partial convergence), anything else raises.

    Raises:
        SolverError: stage 'advance', with the numeric status in `info`.
    '''
    if state.info == 0:
        return
    if state.info == 1:
        _get_logger(logger).info(f"IRLM found all possible eigenvalues: {state.params.converged}",
                            lvl=1, verbose=verbose)
        return
    raise SolverError(state.info, 'advance')

# ----------------------------------------------------------------------------------------
#! Extraction
# ----------------------------------------------------------------------------------------

def extract(state       : IterationState,
            primitive   : ReverseCommunicationSolver,
            logger      : Optional['Logger']    = None,
            verbose     : bool                  = True) -> Tuple[NDArray, NDArray, NDArray]:
    '''
    Converged Ritz pairs, most relevant first.

    Returns:
        (eigenvalues, eigenvectors, residual_norms) with eigenvectors of shape (n, nconv).

    Raises:
        SolverError: stage 'extract' when the primitive reports a nonzero status.
    '''
    values, packed, status = primitive.extract(state, True)
    if status != 0:
        raise SolverError(status, 'extract')

    n       = state.n
    values  = np.asarray(values, dtype=np.float64).reshape(-1)
    nconv   = values.shape[0]
    packed  = np.asarray(packed, dtype=np.float64).reshape(-1)
    if packed.shape[0] < nconv * n:
        raise ProtocolError(EigenErrorMsg.BAD_OFFSETS,
                    f"Vector buffer of length {packed.shape[0]} cannot hold {nconv} vectors of length {n}")
    vectors = packed[:nconv * n].reshape((n, nconv), order='F')
    bounds  = np.array(state.bounds[:nconv], dtype=np.float64)

    # the primitive hands the least relevant pair first
    values  = values[::-1].copy()
    vectors = vectors[:, ::-1].copy()
    bounds  = bounds[::-1].copy()

    _get_logger(logger).info(f"IRLM computed {nconv} eigenvalues", lvl=1, verbose=verbose)
    return values, vectors, bounds

# ----------------------------------------------------------------------------------------
#! Public entry point
# ----------------------------------------------------------------------------------------

def eigen(A,
        k               : int,
        which           : Union[Criterion, str],
        tol             : float                                 = DEFAULT_TOL,
        max_iter        : Optional[int]                         = None,
        *,
        v0              : Optional[NDArray]                     = None,
        seed            : Optional[int]                         = None,
        max_restarts    : int                                   = DEFAULT_MAX_RESTARTS,
        primitive       : Optional[ReverseCommunicationSolver]  = None,
        logger          : Optional['Logger']                    = None,
        verbose         : bool                                  = True) -> EigenResult:
    r'''
    Compute k eigenpairs of the real symmetric operator A with the IRLM.

    Parameters:
    -----------
        A:
            Dense or sparse matrix, scipy LinearOperator or any Operator.
        k:
            Number of eigenpairs, 0 < k < n.
        which:
            'LA', 'SA', 'LM', 'SM', 'BE' (or a Criterion).
        tol:
            Relative accuracy of the Ritz values, must exceed machine epsilon.
        max_iter:
            Cap on the reverse-communication passes (default 10 n).
        v0:
            Starting vector (random when None).
        seed:
            Seed of the random starting vector, equal seeds give equal results.
        max_restarts:
            Cap on the restarts performed by the primitive.
        primitive:
            Reverse-communication solver (default: ImplicitLanczos).
        logger:
            Logger for the progress records (default: the global logger).
        verbose:
            Set False to silence the progress records.

    Returns:
        EigenResult with the most relevant eigenpair at index 0. When the restart
        cap is reached with a partial set of converged pairs, `info == 1` and fewer
        than k pairs are returned.
    '''
    op          = as_operator(A)
    primitive   = primitive if primitive is not None else ImplicitLanczos()
    logger      = _get_logger(logger)

    state, max_iter = prepare(op, k, which, tol, max_iter,
                        v0              = v0,
                        seed            = seed,
                        max_restarts    = max_restarts)

    iterations  = iterate(op, state, primitive, max_iter, logger=logger, verbose=verbose)
    if state.signal != Signal.DONE:
        logger.warning(f"IRLM: iteration budget of {max_iter} passes exhausted before convergence",
                    lvl=1, verbose=verbose)
    check_status(state, logger=logger, verbose=verbose)

    values, vectors, bounds = extract(state, primitive, logger=logger, verbose=verbose)
    return EigenResult(
        eigenvalues     = values,
        eigenvectors    = vectors,
        iterations      = iterations,
        converged       = values.shape[0] == state.nev,
        residual_norms  = bounds,
        info            = state.info,
    )

# ----------------------------------------------------------------------------------------
#! Solver class
# ----------------------------------------------------------------------------------------

class ArpackEigensolver(EigenSolver):
    """
    Implicitly restarted Lanczos eigensolver for real symmetric operators.

    Parameters:
    -----------
        k:
            Number of eigenvalues to compute
        which:
            'LA', 'SA', 'LM', 'SM' or 'BE'
        tol:
            Convergence tolerance (default: 1e-8)
        max_iter:
            Maximum number of reverse-communication passes (default: 10 n)
        max_restarts:
            Maximum number of implicit restarts (default: 300)
        seed:
            Seed of the random starting vector

    Example:
        >>> solver = ArpackEigensolver(k=4, which='SA')
        >>> result = solver.solve(A)
        >>> print(f"Smallest eigenvalues: {result.eigenvalues}")
    """

    def __init__(self,
                k               : int                       = 6,
                which           : Union[Criterion, str]     = 'SA',
                tol             : float                     = DEFAULT_TOL,
                max_iter        : Optional[int]             = None,
                max_restarts    : int                       = DEFAULT_MAX_RESTARTS,
                seed            : Optional[int]             = None,
                primitive       : Optional[ReverseCommunicationSolver] = None,
                logger          : Optional['Logger']        = None,
                verbose         : bool                      = True):
        self.k              = k
        self.which          = which
        self.tol            = tol
        self.max_iter       = max_iter
        self.max_restarts   = max_restarts
        self.seed           = seed
        self.primitive      = primitive
        self.logger         = logger
        self.verbose        = verbose

    @staticmethod
    def is_iterative_solver() -> bool:
        return True

    def solve(self,
            A           = None,
            matvec      : Optional[Callable[[NDArray], NDArray]]    = None,
            n           : Optional[int]                             = None,
            *,
            k           : Optional[int]                             = None,
            which       : Optional[Union[Criterion, str]]           = None,
            v0          : Optional[NDArray]                         = None,
            seed        : Optional[int]                             = None) -> EigenResult:
        """
        Solve for eigenvalues and eigenvectors.

        Parameters:
        -----------
            A:
                Matrix or operator (if provided, matvec is ignored)
            matvec:
                Matrix-vector product function (if A not provided), assumed symmetric
            n:
                Dimension of the problem (required with matvec)
            k, which, v0, seed:
                Override the values given at construction
        """
        if A is None:
            if matvec is None:
                raise ValueError("Either A or matvec must be provided")
            if n is None:
                raise ValueError("n must be provided when using matvec")
            A = FunctionOperator(matvec, n)

        return eigen(A,
                k               = self.k if k is None else k,
                which           = self.which if which is None else which,
                tol             = self.tol,
                max_iter        = self.max_iter,
                v0              = v0,
                seed            = self.seed if seed is None else seed,
                max_restarts    = self.max_restarts,
                primitive       = self.primitive,
                logger          = self.logger,
                verbose         = self.verbose)

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
