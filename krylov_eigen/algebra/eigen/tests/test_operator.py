"""
Tests for the operator wrappers and the criterion / state records.
"""

import numpy as np
import pytest
import scipy.sparse as sp
from scipy.sparse.linalg import aslinearoperator

from krylov_eigen.algebra.eigen import (
    Operator, MatrixOperator, FunctionOperator, as_operator, Criterion, IterationState,
    SymmetryError, eigen,
)

# ----------------------------------

class TestOperators:

    def test_dense_matrix(self):
        A   = np.array([[2.0, 1.0], [1.0, 3.0]])
        op  = as_operator(A)
        assert isinstance(op, MatrixOperator)
        assert isinstance(op, Operator)
        assert op.shape == (2, 2)
        assert op.dimension() == 2
        assert op.is_symmetric()
        assert np.allclose(op.multiply(np.array([1.0, 0.0])), [2.0, 1.0])

    def test_sparse_matrix(self):
        A   = sp.csr_matrix(np.array([[2.0, 1.0], [0.0, 3.0]]))
        op  = as_operator(A)
        assert not op.is_symmetric()
        assert op.multiply(np.ones(2)).shape == (2,)

    def test_non_square_is_not_symmetric(self):
        assert not MatrixOperator(np.ones((3, 4))).is_symmetric()

    @pytest.mark.parametrize("storage", [np.asarray, sp.csr_matrix])
    def test_small_asymmetry_is_rejected(self, storage):
        A       = np.diag(np.arange(1.0, 11.0))
        A[0, 1] = 1.0
        A[1, 0] = 1.000001
        assert not MatrixOperator(storage(A)).is_symmetric()
        with pytest.raises(SymmetryError):
            eigen(storage(A), 2, 'LA', verbose=False)

    def test_symmetry_check_same_for_dense_and_sparse(self):
        # asymmetry far below the entries' scale
        A       = np.diag(np.arange(1.0, 11.0)) * 1e4
        A[0, 1] = 1.0
        A[1, 0] = 1.0 + 1e-10
        dense   = MatrixOperator(A).is_symmetric()
        sparse  = MatrixOperator(sp.csr_matrix(A)).is_symmetric()
        assert dense and sparse

        A[1, 0] = 1.0 + 1e-3
        assert not MatrixOperator(A).is_symmetric()
        assert not MatrixOperator(sp.csr_matrix(A)).is_symmetric()

    def test_symmetry_tolerance_is_absolute_below_unit_scale(self):
        A       = np.array([[1e-8, 2e-8], [2e-8 + 1e-11, 3e-8]])
        assert not MatrixOperator(A).is_symmetric()
        assert MatrixOperator(A, atol=1e-10).is_symmetric()

    def test_rejects_vectors(self):
        with pytest.raises(ValueError):
            MatrixOperator(np.ones(3))

    def test_linear_operator(self):
        A   = np.diag([1.0, 2.0, 3.0])
        op  = as_operator(aslinearoperator(A))
        assert isinstance(op, FunctionOperator)
        assert op.is_symmetric()
        assert np.allclose(op.multiply(np.ones(3)), [1.0, 2.0, 3.0])

    def test_function_operator(self):
        op = FunctionOperator(lambda x: 2.0 * x, 5, symmetric=False, ncol=5)
        assert op.shape == (5, 5)
        assert not op.is_symmetric()
        assert as_operator(op) is op

    def test_unknown_object(self):
        with pytest.raises(TypeError):
            as_operator("not a matrix")

# ----------------------------------

class TestCriterion:

    @pytest.mark.parametrize("value, expected", [
        ('LA',                          Criterion.LA),
        ('sa',                          Criterion.SA),
        (' lm ',                        Criterion.LM),
        ('largest',                     Criterion.LA),
        ('smallest',                    Criterion.SA),
        ('both',                        Criterion.BE),
        ('SmallestMagnitude',           Criterion.SM),
        (Criterion.BothEnds,            Criterion.BE),
    ])
    def test_parse(self, value, expected):
        assert Criterion.parse(value) is expected

    @pytest.mark.parametrize("value", ['XX', '', 3, None])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError):
            Criterion.parse(value)

    def test_aliases(self):
        assert Criterion.LargestAlgebraic is Criterion.LA
        assert Criterion.BothEnds is Criterion.BE

# ----------------------------------

class TestIterationState:

    def test_allocate(self):
        state = IterationState.allocate(10, 2, 6, Criterion.LA, 1e-8)
        assert state.resid.shape == (10,)
        assert state.basis.shape == (60,)
        assert state.workd.shape == (30,)
        assert state.workl.shape == (6 * 14,)
        assert state.V.shape == (10, 6)
        assert state.info == 0

    def test_basis_is_column_major(self):
        state                   = IterationState.allocate(4, 1, 3, Criterion.LA, 1e-8)
        state.V[:, 1]           = 7.0
        assert np.all(state.basis[4:8] == 7.0)

    def test_starting_vector(self):
        v0      = np.arange(5.0)
        state   = IterationState.allocate(5, 1, 3, Criterion.SA, 1e-8, v0=v0)
        assert state.info == 1
        assert np.array_equal(state.resid, v0)

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
