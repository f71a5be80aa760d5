"""
Tests of the reverse-communication primitive on its own: selection order,
status codes and a hand-written reverse-communication loop.
"""

import numpy as np
import pytest

from krylov_eigen.algebra.eigen.irlm import ImplicitLanczos, relevance_order, EPS23
from krylov_eigen.algebra.eigen.params import Criterion, Signal, IterationState, MULTIPLY_SIGNALS
from krylov_eigen.algebra.eigen import eigen

# ----------------------------------
#! Helpers
# ----------------------------------

def run_loop(A, state, primitive=None, max_passes=10000):
    """Plain reverse-communication loop, returns the number of products."""
    primitive   = primitive or ImplicitLanczos()
    n           = state.n
    products    = 0
    while primitive.advance(state) != Signal.DONE and products < max_passes:
        assert state.signal in MULTIPLY_SIGNALS
        p                                                   = state.pointers
        x                                                   = state.workd[p.input_offset:p.input_offset + n]
        state.workd[p.output_offset:p.output_offset + n]    = A @ x
        products += 1
    return products

def fresh_state(n=10, nev=2, ncv=6, which=Criterion.LA, **kwargs):
    return IterationState.allocate(n, nev, ncv, which, 1e-8, **kwargs)

# ----------------------------------
#! Selection order
# ----------------------------------

class TestRelevanceOrder:

    theta = np.array([-5.0, 0.5, 3.0, -1.0, 4.0, 2.0])

    def test_largest_algebraic(self):
        idx = relevance_order(self.theta, Criterion.LA, 3)
        assert np.array_equal(self.theta[idx], [2.0, 3.0, 4.0])

    def test_smallest_algebraic(self):
        idx = relevance_order(self.theta, Criterion.SA, 3)
        assert np.array_equal(self.theta[idx], [0.5, -1.0, -5.0])

    def test_largest_magnitude(self):
        idx = relevance_order(self.theta, Criterion.LM, 2)
        assert np.array_equal(self.theta[idx], [4.0, -5.0])

    def test_smallest_magnitude(self):
        idx = relevance_order(self.theta, Criterion.SM, 2)
        assert np.array_equal(self.theta[idx], [-1.0, 0.5])

    def test_both_ends(self):
        even    = relevance_order(self.theta, Criterion.BE, 4)
        odd     = relevance_order(self.theta, Criterion.BE, 3)
        assert np.array_equal(self.theta[even], [-1.0, -5.0, 3.0, 4.0])
        assert np.array_equal(self.theta[odd], [-5.0, 3.0, 4.0])

    def test_empty(self):
        assert relevance_order(self.theta, Criterion.LA, 0).size == 0
        assert relevance_order(self.theta, Criterion.LA, 10).size == self.theta.size

# ----------------------------------
#! Status codes
# ----------------------------------

class TestValidation:

    @pytest.mark.parametrize("build, code", [
        (lambda: fresh_state(n=0, nev=1, ncv=2),                    -1),
        (lambda: fresh_state(nev=0, ncv=3),                         -2),
        (lambda: fresh_state(nev=3, ncv=3),                         -3),
        (lambda: fresh_state(nev=3, ncv=11),                        -3),
        (lambda: fresh_state(max_restarts=0),                       -4),
        (lambda: fresh_state(which='LA'),                           -5),
        (lambda: fresh_state(v0=np.zeros(10)),                      -9),
        (lambda: fresh_state(which=Criterion.BE, nev=1, ncv=3),     -13),
    ])
    def test_start_codes(self, build, code):
        state = build()
        assert ImplicitLanczos().advance(state) == Signal.DONE
        assert state.info == code

    def test_short_workl(self):
        state       = fresh_state()
        state.workl = np.zeros(5)
        ImplicitLanczos().advance(state)
        assert state.info == -7

    @pytest.mark.parametrize("field, value, code", [
        ('mode',            3,  -10),
        ('shift_strategy',  2,  -12),
    ])
    def test_parameter_codes(self, field, value, code):
        state = fresh_state()
        setattr(state.params, field, value)
        ImplicitLanczos().advance(state)
        assert state.info == code

    def test_extract_codes(self):
        primitive           = ImplicitLanczos()
        _, _, status        = primitive.extract(fresh_state(which=Criterion.BE, nev=1, ncv=3), True)
        assert status == -12
        values, _, status   = primitive.extract(fresh_state(), True)
        assert status == -14
        assert values.size == 0

    def test_kept_size(self):
        assert ImplicitLanczos._kept_size(1, 10, 0) == 5
        assert ImplicitLanczos._kept_size(1, 5, 0) == 2
        assert ImplicitLanczos._kept_size(1, 3, 0) == 1
        assert ImplicitLanczos._kept_size(4, 12, 2) == 6
        assert ImplicitLanczos._kept_size(4, 12, 10) == 8
        assert ImplicitLanczos._kept_size(5, 6, 3) == 5

# ----------------------------------
#! Reverse communication
# ----------------------------------

class TestReverseCommunication:

    def test_manual_loop(self):
        """Products requested, counters updated, values handed out least relevant first."""
        n           = 40
        d           = np.concatenate((np.linspace(0.0, 1.0, n - 3), [5.0, 6.0, 7.0]))
        A           = np.diag(d)
        state       = fresh_state(n=n, nev=3, ncv=9, seed=0)
        primitive   = ImplicitLanczos()
        products    = run_loop(A, state, primitive)

        assert state.info == 0
        assert state.params.num_products == products
        assert state.params.num_reorthogonalizations == products
        assert state.params.restarts >= 1
        assert state.params.converged >= 3

        values, packed, status = primitive.extract(state, True)
        assert status == 0
        assert np.allclose(values, [5.0, 6.0, 7.0])
        vectors = packed.reshape((n, values.size), order='F')
        assert np.allclose(np.abs(vectors[n - 3:, :]), np.eye(3), atol=1e-6)
        assert np.allclose(state.ritz[:3], values)
        assert np.all(state.bounds[:3] <= 1e-8 * np.maximum(EPS23, np.abs(values)))

    def test_first_request_is_init(self):
        state   = fresh_state(seed=1)
        signal  = ImplicitLanczos().advance(state)
        assert signal == Signal.MULTIPLY_INIT
        assert state.pointers.input_offset == 0
        assert state.pointers.output_offset == state.n
        assert np.linalg.norm(state.workd[:state.n]) == pytest.approx(1.0)

    def test_user_shifts(self):
        n       = 50
        A       = np.diag(np.linspace(1.0, 2.0, n))
        state   = fresh_state(n=n, nev=2, ncv=6, seed=0)
        state.params.shift_strategy = 0
        run_loop(A, state, max_passes=6)
        assert state.signal == Signal.USER_SHIFTS

        primitive = ImplicitLanczos()
        assert primitive.advance(state) == Signal.DONE
        assert state.info == 3

    def test_invariant_subspace_start(self):
        """A start vector inside an invariant subspace still reaches the top of the spectrum."""
        n       = 10
        v0      = np.zeros(n)
        v0[:2]  = 1.0
        result  = eigen(np.diag(np.arange(1.0, n + 1.0)), 1, 'LA', v0=v0, seed=0, verbose=False)
        assert result.eigenvalues[0] == pytest.approx(10.0)

    def test_full_space(self):
        """ncv == n: the first factorization is exact."""
        n       = 6
        A       = np.diag([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
        state   = fresh_state(n=n, nev=2, ncv=6, which=Criterion.SA, seed=2)
        run_loop(A, state)
        assert state.info == 0
        assert state.params.restarts == 1
        values, _, status = ImplicitLanczos().extract(state, False)
        assert status == 0
        assert np.allclose(values, [2.0, 1.0])

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
