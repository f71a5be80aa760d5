r"""
Implicitly Restarted Lanczos primitive with a reverse-communication interface.

The primitive never sees the operator. Each call to `advance` either asks the
caller for a product y = A x (the vector x is placed in the communication buffer
`workd`, the result is expected at another offset of the same buffer) or reports
that the iteration is over. All of its state lives in the IterationState, so one
instance can serve any number of independent solves.

Mathematical Background:
    1. A Lanczos factorization of size m = ncv with full reorthogonalization
        $$
        A V_m = V_m H_m + f_m b^T ,\qquad V_m^T V_m = I,\quad V_m^T f_m = 0
        $$
       (b = \beta e_m for a plain Lanczos run).
    2. Rayleigh-Ritz: H_m = S \Theta S^T. The residual of the Ritz pair
       (\theta_i, V_m s_i) is |b^T s_i|; a wanted value is converged when
        $$
        |b^T s_i| \le tol \cdot \max(\epsilon^{2/3}, |\theta_i|)
        $$
    3. Implicit restart with exact shifts: filtering out the unwanted Ritz values
       compresses the factorization onto the kev wanted Ritz vectors,
        $$
        A (V_m S_k) = (V_m S_k) \Theta_k + f_m (b^T S_k),
        $$
       after which the recurrence continues from v_{k+1} = f_m / ||f_m||.

Ordering convention:
    Ritz values are handed out least relevant first (the wanted values sit at the
    end of the array), for 'BE' the lower half descending followed by the upper
    half ascending. Callers reverse to get the most relevant value first.

References:
    - D. C. Sorensen, "Implicit application of polynomial filters in a k-step
      Arnoldi method", SIAM J. Matrix Anal. Appl. 13 (1992)
    - K. Wu, H. Simon, "Thick-restart Lanczos method for large symmetric
      eigenvalue problems", SIAM J. Matrix Anal. Appl. 22 (2000)

file    : krylov_eigen/algebra/eigen/irlm.py
"""

from typing import Optional, Protocol, Tuple

import numpy as np
import scipy.linalg
from numpy.typing import NDArray

from .params import Criterion, Signal, MULTIPLY_SIGNALS, IterationState, EPSILON

# ----------------------------------------------------------------------------------------
#! Constants
# ----------------------------------------------------------------------------------------

EPS23               = EPSILON ** (2.0 / 3.0)
# relative size of a residual treated as an invariant subspace
BREAKDOWN_FACTOR    = 1e3

# ----------------------------------------------------------------------------------------
#! Interface
# ----------------------------------------------------------------------------------------

class ReverseCommunicationSolver(Protocol):
    '''
    What the driver needs from a reverse-communication eigensolver.
    '''

    def advance(self, state: IterationState) -> int:
        '''Advance the iteration, mutating `state`, and return the new signal.'''
        ...

    def extract(self, state: IterationState, want_vectors: bool) -> Tuple[NDArray, NDArray, int]:
        '''
        Converged Ritz values, the Ritz vectors packed column-major (n * nconv entries)
        and a status code (0 on success).
        '''
        ...

# ----------------------------------------------------------------------------------------
#! Ritz value selection
# ----------------------------------------------------------------------------------------

def relevance_order(theta: NDArray, which: Criterion, count: int) -> NDArray:
    '''
    Indices of the `count` values of `theta` wanted by `which`, least relevant first.

    For 'BE' the lower `count // 2` values come first in descending order, then the
    upper `count - count // 2` values in ascending order.
    '''
    theta = np.asarray(theta)
    count = int(min(count, theta.size))
    if count <= 0:
        return np.empty(0, dtype=np.intp)

    if which is Criterion.LA:
        order = np.argsort(theta, kind='stable')
    elif which is Criterion.SA:
        order = np.argsort(-theta, kind='stable')
    elif which is Criterion.LM:
        order = np.argsort(np.abs(theta), kind='stable')
    elif which is Criterion.SM:
        order = np.argsort(-np.abs(theta), kind='stable')
    elif which is Criterion.BE:
        ascending   = np.argsort(theta, kind='stable')
        n_low       = count // 2
        n_high      = count - n_low
        low         = ascending[:n_low][::-1]
        high        = ascending[ascending.size - n_high:]
        return np.concatenate((low, high))
    else:
        raise ValueError(f"Invalid criterion: {which!r}")
    return order[order.size - count:]

def _converged(theta: NDArray, bounds: NDArray, tol: float) -> NDArray:
    return bounds <= tol * np.maximum(EPS23, np.abs(theta))

# ----------------------------------------------------------------------------------------
#! ImplicitLanczos
# ----------------------------------------------------------------------------------------

class ImplicitLanczos:
    r"""
    Reverse-communication IRLM for real symmetric operators (mode 1, B = I).

    The calling sequence mirrors ARPACK dsaupd / dseupd:

        >>> primitive = ImplicitLanczos()
        >>> while primitive.advance(state) != Signal.DONE:
        ...     p = state.pointers
        ...     x = state.workd[p.input_offset : p.input_offset + n]
        ...     state.workd[p.output_offset : p.output_offset + n] = A @ x
        >>> values, vectors, status = primitive.extract(state, True)

    Status codes left in `state.info` follow the dsaupd table (see errors.ADVANCE_STATUS).
    """

    # ------------------------------------------------------------------------------------
    #! advance
    # ------------------------------------------------------------------------------------

    def advance(self, state: IterationState) -> int:
        if state.signal == Signal.START:
            return self._start(state)
        if state.signal in MULTIPLY_SIGNALS:
            return self._absorb(state)
        if state.signal == Signal.USER_SHIFTS:
            # shifts from the caller are not applied by this implementation
            return self._finish(state, 3)
        return state.signal

    # ------------------------------------------------------------------------------------

    @staticmethod
    def _validate(state: IterationState) -> int:
        n, nev, ncv = state.n, state.nev, state.ncv
        if n <= 0:
            return -1
        if nev <= 0:
            return -2
        if ncv <= nev or ncv > n:
            return -3
        if state.params.max_restarts <= 0:
            return -4
        if not isinstance(state.which, Criterion):
            return -5
        if state.workl.shape[0] < ncv * (ncv + 8):
            return -7
        if state.params.mode != 1:
            return -10
        if state.params.shift_strategy not in (0, 1):
            return -12
        if state.which is Criterion.BE and nev == 1:
            return -13
        return 0

    @staticmethod
    def _finish(state: IterationState, info: int) -> int:
        state.info      = info
        state.signal    = Signal.DONE
        return state.signal

    @staticmethod
    def _request(state: IterationState, column: int, signal: Signal) -> int:
        '''Ask the caller for A @ V[:, column].'''
        n                       = state.n
        p                       = state.pointers
        p.input_offset          = 0
        p.output_offset         = n
        state.workd[:n]         = state.V[:, column]
        state.signal            = signal
        return signal

    # ------------------------------------------------------------------------------------

    def _start(self, state: IterationState) -> int:
        info = self._validate(state)
        if info != 0:
            return self._finish(state, info)

        n, ncv                  = state.n, state.ncv
        p                       = state.pointers
        p.projection_offset     = 0
        p.ritz_offset           = ncv * ncv
        p.bounds_offset         = ncv * ncv + ncv

        cur                     = state.cursor
        cur.rng                 = np.random.default_rng(cur.seed)
        cur.step                = 0
        cur.kev                 = state.nev
        cur.rnorm               = 0.0
        cur.anorm               = 0.0
        cur.coupling            = np.zeros(ncv)

        if state.info == 1:
            v = np.array(state.resid, dtype=np.float64)
        else:
            v = cur.rng.uniform(-1.0, 1.0, n)
        norm = np.linalg.norm(v)
        if not np.isfinite(norm) or norm == 0.0:
            return self._finish(state, -9)

        state.info                              = 0
        state.params.converged                  = 0
        state.params.restarts                   = 0
        state.params.num_products               = 0
        state.params.num_reorthogonalizations   = 0
        state.projection[:]                     = 0.0
        state.V[:, 0]                           = v / norm
        return self._request(state, 0, Signal.MULTIPLY_INIT)

    # ------------------------------------------------------------------------------------

    def _absorb(self, state: IterationState) -> int:
        '''
        Take the product A v_j from the communication buffer and extend the
        factorization by one column.
        '''
        n, ncv  = state.n, state.ncv
        cur     = state.cursor
        p       = state.pointers
        V, H    = state.V, state.projection
        j       = cur.step

        w       = np.array(state.workd[p.output_offset:p.output_offset + n], dtype=np.float64)
        state.params.num_products += 1

        # classical Gram-Schmidt, applied twice
        basis   = V[:, :j + 1]
        h       = basis.T @ w
        w      -= basis @ h
        c       = basis.T @ w
        w      -= basis @ c
        h      += c
        state.params.num_reorthogonalizations += 1

        H[:j + 1, j]    = h
        H[j, :j + 1]    = h
        beta            = float(np.linalg.norm(w))
        cur.anorm       = max(cur.anorm, float(np.hypot(np.linalg.norm(h), beta)))
        cur.rnorm       = beta
        cur.coupling[:] = 0.0
        cur.coupling[j] = beta
        cur.step        = j + 1

        if cur.step == ncv:
            state.resid[:] = w
            return self._check_and_restart(state)

        if beta <= BREAKDOWN_FACTOR * EPSILON * cur.anorm:
            # invariant subspace, continue with a new direction
            v = self._fresh_direction(state, cur.step)
            if v is None:
                state.params.converged = cur.step
                return self._finish(state, -9999)
            cur.rnorm       = 0.0
            cur.coupling[j] = 0.0
        else:
            v = w / beta
        V[:, cur.step] = v
        return self._request(state, cur.step, Signal.MULTIPLY)

    @staticmethod
    def _fresh_direction(state: IterationState, column: int) -> Optional[NDArray]:
        '''Random unit vector orthogonal to the first `column` basis vectors.'''
        basis = state.V[:, :column]
        for _ in range(3):
            r       = state.cursor.rng.uniform(-1.0, 1.0, state.n)
            r0      = np.linalg.norm(r)
            r      -= basis @ (basis.T @ r)
            r      -= basis @ (basis.T @ r)
            norm    = np.linalg.norm(r)
            if norm > np.sqrt(EPSILON) * r0:
                return r / norm
        return None

    # ------------------------------------------------------------------------------------

    @staticmethod
    def _kept_size(nev: int, ncv: int, nconv: int) -> int:
        '''Size of the compressed factorization, grown with the converged count.'''
        kev = nev + min(nconv, (ncv - nev) // 2)
        if nev == 1 and ncv >= 6:
            kev = ncv // 2
        elif nev == 1 and ncv > 3:
            kev = 2
        return min(kev, ncv - 1)

    def _check_and_restart(self, state: IterationState) -> int:
        '''
        Full factorization available: test convergence, then finish or restart.
        '''
        cur     = state.cursor
        params  = state.params
        ncv     = state.ncv

        try:
            theta, S = scipy.linalg.eigh(state.projection)
        except np.linalg.LinAlgError:
            return self._finish(state, -8)

        bounds              = np.abs(cur.coupling @ S)
        state.ritz[:]       = theta
        state.bounds[:]     = bounds
        params.restarts    += 1

        wanted              = relevance_order(theta, state.which, state.nev)
        nconv               = int(np.count_nonzero(_converged(theta[wanted], bounds[wanted], state.tol)))
        params.converged    = nconv

        if nconv >= state.nev:
            return self._finish(state, 0)
        if params.restarts >= params.max_restarts:
            return self._finish(state, 1)
        if params.shift_strategy == 0:
            state.signal = Signal.USER_SHIFTS
            return state.signal

        keep = relevance_order(theta, state.which, self._kept_size(state.nev, ncv, nconv))
        if keep.size >= ncv:
            return self._finish(state, 3)
        return self._compress(state, theta, S, keep)

    def _compress(self, state: IterationState, theta: NDArray, S: NDArray, keep: NDArray) -> int:
        '''
        Apply the unwanted Ritz values as exact shifts: keep the wanted Ritz vectors
        and continue the recurrence from the normalized residual.
        '''
        cur             = state.cursor
        V, H            = state.V, state.projection
        kev             = keep.size

        V[:, :kev]      = V @ S[:, keep]
        coupling        = cur.coupling @ S[:, keep]
        H[:]            = 0.0
        H[:kev, :kev]   = np.diag(theta[keep])

        cur.coupling[:]     = 0.0
        cur.coupling[:kev]  = coupling
        cur.kev             = kev
        cur.step            = kev

        if cur.rnorm > BREAKDOWN_FACTOR * EPSILON * cur.anorm:
            V[:, kev] = state.resid / cur.rnorm
        else:
            v = self._fresh_direction(state, kev)
            if v is None:
                return self._finish(state, -9999)
            V[:, kev] = v
        return self._request(state, kev, Signal.MULTIPLY)

    # ------------------------------------------------------------------------------------
    #! extract
    # ------------------------------------------------------------------------------------

    def extract(self, state: IterationState, want_vectors: bool = True) -> Tuple[NDArray, NDArray, int]:
        '''
        Converged Ritz pairs of the current factorization.

        The Ritz vectors overwrite the first `nconv * n` entries of the basis buffer
        (column-major) and their error estimates the first `nconv` entries of `bounds`.
        '''
        empty   = np.empty(0, dtype=np.float64)
        info    = self._validate(state)
        if info != 0:
            return empty, empty, (-12 if info == -13 else info)

        n       = state.n
        j       = state.cursor.step
        if j == 0:
            state.params.converged = 0
            return empty, empty, -14

        try:
            theta, S = scipy.linalg.eigh(state.projection[:j, :j])
        except np.linalg.LinAlgError:
            return empty, empty, -8

        bounds  = np.abs(state.cursor.coupling[:j] @ S)
        wanted  = relevance_order(theta, state.which, state.nev)
        picked  = wanted[_converged(theta[wanted], bounds[wanted], state.tol)]
        nconv   = picked.size
        state.params.converged = nconv
        if nconv == 0:
            return empty, empty, -14

        values                  = theta[picked].copy()
        state.ritz[:nconv]      = values
        state.bounds[:nconv]    = bounds[picked]
        if not want_vectors:
            return values, empty, 0

        Z                       = state.V[:, :j] @ S[:, picked]
        state.basis[:nconv * n] = Z.ravel(order='F')
        return values, state.basis[:nconv * n], 0

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
