'''
General tests for import behavior of the krylov_eigen package.

Ensures that submodules are lazily imported and key exports are available.

Tests:
- Lazy loading of subpackages
- Key class/function exports
- Package metadata presence
'''

import importlib
import types

# -------------------------------------------------------------------

def test_root_imports_lazy():
    import krylov_eigen as ke
    # Accessing attribute should trigger lazy import
    algebra = ke.algebra
    assert isinstance(algebra, types.ModuleType)

# -------------------------------------------------------------------

def test_eigen_exports():
    from krylov_eigen.algebra.eigen import (
        eigen, prepare, iterate, check_status, extract, ArpackEigensolver, ImplicitLanczos,
        Criterion, Signal, IterationState, EigenResult, choose_eigensolver, full_diagonalization,
    )
    assert callable(eigen)
    assert callable(prepare) and callable(iterate) and callable(check_status) and callable(extract)
    assert ArpackEigensolver.is_iterative_solver()
    assert hasattr(ImplicitLanczos, 'advance') and hasattr(ImplicitLanczos, 'extract')
    assert Signal.DONE == 99
    assert Criterion.parse('LA') is Criterion.LA

def test_errors_module():
    errors = importlib.import_module("krylov_eigen.algebra.eigen.errors")
    assert issubclass(errors.ShapeError, ValueError)
    assert issubclass(errors.SymmetryError, ValueError)
    assert issubclass(errors.InvalidArgument, ValueError)
    assert issubclass(errors.ProtocolError, RuntimeError)
    assert issubclass(errors.SolverError, RuntimeError)
    err = errors.SolverError(-14, 'extract')
    assert err.info == -14
    assert "accuracy" in str(err)

def test_top_level_shortcut():
    import numpy as np
    import krylov_eigen as ke
    result = ke.eigen(np.diag([1.0, 2.0, 3.0, 10.0]), 1, 'LA', verbose=False)
    assert isinstance(result, ke.EigenResult)
    assert np.isclose(result.eigenvalues[0], 10.0)

# -------------------------------------------------------------------

def test_package_metadata():
    import krylov_eigen as ke
    assert hasattr(ke, "__version__")
    assert ke.get_module_description("algebra") != "Module not found."

# -------------------------------------------------------------------
#! End of file
# -------------------------------------------------------------------
