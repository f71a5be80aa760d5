r"""
Reverse-communication state of the implicitly restarted Lanczos iteration.

The ARPACK calling convention passes the solver configuration and the buffer
offsets as flat integer arrays (`iparam`, `ipntr`) next to a handful of work
buffers. Here they are named records:

    ParameterBlock  : iteration limits, mode flags and output counters (iparam)
    PointerBlock    : offsets of the next input/output vectors (ipntr)
    IterationState  : everything above plus the work buffers, owned by one
                      driver invocation for its whole lifetime

Work buffers:
    resid   (n)             : starting vector on input, final residual on output
    basis   (n * ncv)       : Lanczos basis, column-major; later the Ritz vectors
    workd   (3 n)           : communication buffer for the operator products
    workl   (ncv (ncv + 8)) : private storage of the primitive (projected matrix,
                              Ritz values, error bounds)

file    : krylov_eigen/algebra/eigen/params.py
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray

# ----------------------------------------------------------------------------------------
#! Constants
# ----------------------------------------------------------------------------------------

EPSILON                 = float(np.finfo(np.float64).eps)
DEFAULT_TOL             = 1e-8
DEFAULT_MAX_RESTARTS    = 300

# ----------------------------------------------------------------------------------------
#! Criterion
# ----------------------------------------------------------------------------------------

class Criterion(Enum):
    '''
    Which of the Ritz values to compute.
    '''
    LA                  = 'LA'  # the k largest (algebraic) eigenvalues
    SA                  = 'SA'  # the k smallest (algebraic) eigenvalues
    LM                  = 'LM'  # the k largest (in magnitude) eigenvalues
    SM                  = 'SM'  # the k smallest (in magnitude) eigenvalues
    BE                  = 'BE'  # k eigenvalues, half from each end of the spectrum
    # long names
    LargestAlgebraic    = 'LA'
    SmallestAlgebraic   = 'SA'
    LargestMagnitude    = 'LM'
    SmallestMagnitude   = 'SM'
    BothEnds            = 'BE'

    @classmethod
    def parse(cls, which: Union['Criterion', str]) -> 'Criterion':
        '''
        Accepts a Criterion, an ARPACK string ('LA', 'sa', ...) or one of the
        words 'largest', 'smallest', 'both'.

        Raises:
            ValueError: for anything else.
        '''
        if isinstance(which, cls):
            return which
        if not isinstance(which, str):
            raise ValueError(f"Invalid criterion: {which!r}")

        key     = which.strip()
        words   = {
            'largest'   : cls.LA,
            'smallest'  : cls.SA,
            'both'      : cls.BE,
        }
        if key.lower() in words:
            return words[key.lower()]
        try:
            return cls(key.upper())
        except ValueError:
            pass
        if key in cls.__members__:
            return cls.__members__[key]
        raise ValueError(f"Invalid criterion: {which!r}. Must be one of 'LA', 'SA', 'LM', 'SM', 'BE'.")

# ----------------------------------------------------------------------------------------
#! Signals
# ----------------------------------------------------------------------------------------

class Signal(IntEnum):
    '''
    What the primitive asks of its caller (the ARPACK `ido` flag).
    '''
    START               = 0     # first call, nothing computed yet
    MULTIPLY_INIT       = -1    # y = OP * x while building the first vectors
    MULTIPLY            = 1     # y = OP * x during the iteration
    MULTIPLY_B          = 2     # y = B * x, generalized problems only
    USER_SHIFTS         = 3     # caller must supply the shifts
    DONE                = 99    # iteration finished, inspect `info`

MULTIPLY_SIGNALS = (Signal.MULTIPLY_INIT, Signal.MULTIPLY)

# ----------------------------------------------------------------------------------------
#! Parameter and pointer blocks
# ----------------------------------------------------------------------------------------

@dataclass
class ParameterBlock:
    '''
    Solver configuration and output counters.

    Attributes:
        shift_strategy:
            1 - exact shifts (unwanted Ritz values), 0 - shifts supplied by the caller
        max_restarts:
            maximum number of Lanczos update iterations (restarts) allowed
        block_size:
            block size of the recurrence, only 1 is used
        converged:
            on output, number of Ritz values that satisfy the tolerance
        mode:
            1 - standard eigenproblem A x = lambda x
        restarts:
            on output, number of update iterations taken
        num_products:
            on output, number of OP * x products requested
        num_reorthogonalizations:
            on output, number of reorthogonalization passes
    '''
    shift_strategy              : int = 1
    max_restarts                : int = DEFAULT_MAX_RESTARTS
    block_size                  : int = 1
    converged                   : int = 0
    mode                        : int = 1
    restarts                    : int = 0
    num_products                : int = 0
    num_reorthogonalizations    : int = 0

@dataclass
class PointerBlock:
    '''
    Zero-based offsets into the work buffers.

    `input_offset` and `output_offset` point into `workd`, the other three into `workl`.
    '''
    input_offset        : int = 0
    output_offset       : int = 0
    projection_offset   : int = 0
    ritz_offset         : int = 0
    bounds_offset       : int = 0

@dataclass
class LanczosCursor:
    '''
    Private bookkeeping of the primitive between two calls.
    '''
    step        : int                               = 0     # number of basis columns already multiplied
    kev         : int                               = 0     # size of the factorization kept on restart
    rnorm       : float                             = 0.0   # norm of the current residual
    anorm       : float                             = 0.0   # running estimate of ||A||
    coupling    : Optional[NDArray]                 = None  # b in A V = V H + r b^T
    seed        : Optional[int]                     = None
    rng         : Optional[np.random.Generator]     = None

# ----------------------------------------------------------------------------------------
#! Iteration state
# ----------------------------------------------------------------------------------------

@dataclass
class IterationState:
    '''
    Mutable state shared by the driver and the primitive during one solve.
    '''
    n           : int
    nev         : int
    ncv         : int
    which       : Criterion
    tol         : float
    resid       : NDArray
    basis       : NDArray
    workd       : NDArray
    workl       : NDArray
    params      : ParameterBlock    = field(default_factory=ParameterBlock)
    pointers    : PointerBlock      = field(default_factory=PointerBlock)
    signal      : int               = Signal.START
    info        : int               = 0
    cursor      : LanczosCursor     = field(default_factory=LanczosCursor)

    @classmethod
    def allocate(cls,
                n               : int,
                nev             : int,
                ncv             : int,
                which           : Criterion,
                tol             : float,
                *,
                max_restarts    : int               = DEFAULT_MAX_RESTARTS,
                v0              : Optional[NDArray] = None,
                seed            : Optional[int]     = None) -> 'IterationState':
        '''
        Zero-initialized workspace for a standard symmetric problem.

        With `v0` the residual holds the starting vector and `info = 1`,
        otherwise it stays zero and the primitive draws a random start.
        '''
        resid   = np.zeros(n, dtype=np.float64)
        info    = 0
        if v0 is not None:
            resid[:]    = v0
            info        = 1

        return cls(
            n           = n,
            nev         = nev,
            ncv         = ncv,
            which       = which,
            tol         = tol,
            resid       = resid,
            basis       = np.zeros(n * ncv, dtype=np.float64),
            workd       = np.zeros(3 * n, dtype=np.float64),
            workl       = np.zeros(ncv * (ncv + 8), dtype=np.float64),
            params      = ParameterBlock(shift_strategy=1, max_restarts=max_restarts, block_size=1, mode=1),
            info        = info,
            cursor      = LanczosCursor(seed=seed),
        )

    # ------------------------------------------------------------------------------------

    @property
    def V(self) -> NDArray:
        '''The basis buffer as an (n, ncv) column-major view.'''
        return self.basis.reshape((self.n, self.ncv), order='F')

    @property
    def projection(self) -> NDArray:
        '''Projected matrix V^T A V, an (ncv, ncv) view into `workl`.'''
        start = self.pointers.projection_offset
        return self.workl[start:start + self.ncv * self.ncv].reshape((self.ncv, self.ncv))

    @property
    def ritz(self) -> NDArray:
        start = self.pointers.ritz_offset
        return self.workl[start:start + self.ncv]

    @property
    def bounds(self) -> NDArray:
        '''Error estimates of the Ritz values, aligned with `ritz`.'''
        start = self.pointers.bounds_offset
        return self.workl[start:start + self.ncv]

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
