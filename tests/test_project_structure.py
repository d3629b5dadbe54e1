"""Test that project structure is correct and modules can be imported."""

import core.document
import core.errors
import core.fuzzy
import core.models
import core.parse_cargo
import core.write_cargo
from core.models import Dependency, DependencyType, Local, Remote


def test_core_modules_importable():
    """Ensure core modules can be imported."""
    # This will fail if modules have syntax errors or missing dependencies

    # Basic smoke test - ensure key classes exist
    assert hasattr(core.models, "Dependency")
    assert hasattr(core.models, "Package")
    assert hasattr(core.document, "Document")
    assert hasattr(core.errors, "NotFoundError")
    assert hasattr(core.fuzzy, "FuzzyMatcher")
    assert hasattr(core.parse_cargo, "document_from_path")
    assert hasattr(core.write_cargo, "write_manifest")


def test_model_creation():
    """Test that basic models can be instantiated."""
    dependency = Dependency(dep_name="serde", version="1.0")
    assert dependency.get_name() == "serde"
    assert dependency.origin == Remote()

    local = Dependency(dep_name="helper", origin=Local("../helper"))
    assert local.is_local()
    assert DependencyType().key() == "dependencies"
