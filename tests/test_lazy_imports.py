"""
Tests for the lazy import mechanism in krylov_eigen.
"""

import sys
import types
import pytest

# --------------------------------------------

def test_lazy_imports_not_loaded_initially():
    """Importing the top-level package does not load the solvers."""
    # Ensure fresh start
    to_remove = [m for m in sys.modules if m == 'krylov_eigen' or m.startswith('krylov_eigen.')]
    for m in to_remove:
        del sys.modules[m]

    import krylov_eigen

    assert isinstance(krylov_eigen, types.ModuleType)
    assert 'krylov_eigen.algebra.eigen.arpack' not in sys.modules

def test_lazy_access():
    """Accessing attributes triggers the import."""
    import krylov_eigen

    algebra_mod = krylov_eigen.algebra
    assert isinstance(algebra_mod, types.ModuleType)
    assert algebra_mod.__name__ == "krylov_eigen.algebra"

    common_mod = krylov_eigen.common
    assert common_mod.__name__ == "krylov_eigen.common"

def test_eigen_lazy_access():
    """The eigen subpackage resolves its exports on first access."""
    import krylov_eigen

    eigen_mod = krylov_eigen.algebra.eigen
    assert isinstance(eigen_mod, types.ModuleType)
    assert eigen_mod.__name__ == "krylov_eigen.algebra.eigen"

    solver = eigen_mod.ArpackEigensolver
    assert solver.__module__ == "krylov_eigen.algebra.eigen.arpack"
    assert eigen_mod.errors.__name__ == "krylov_eigen.algebra.eigen.errors"

def test_logger_alias():
    """algebra.get_logger is the global logger factory."""
    import krylov_eigen
    from krylov_eigen.common import get_global_logger
    assert krylov_eigen.algebra.get_logger is get_global_logger

def test_dir_autocompletion():
    """dir() lists lazy attributes."""
    import krylov_eigen
    attrs = dir(krylov_eigen)
    assert "algebra" in attrs
    assert "eigen" in attrs
    assert "ArpackEigensolver" in dir(krylov_eigen.algebra.eigen)

def test_invalid_attribute():
    """Accessing non-existent attributes raises AttributeError."""
    import krylov_eigen
    with pytest.raises(AttributeError, match="has no attribute 'non_existent'"):
        _ = krylov_eigen.non_existent
    with pytest.raises(AttributeError):
        _ = krylov_eigen.algebra.eigen.non_existent

# ---------------------------------------------
#! EOF
# ---------------------------------------------
