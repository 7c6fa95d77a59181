# =============================================================================
# test_registry.py - Function Registry Tests
# =============================================================================

import pytest

from mscript.errors import RegistryError
from mscript.compiler.registry import (
    CallableDescriptor,
    FunctionRegistry,
    builtin_descriptors,
    default_registry,
)


class TestFunctionRegistry:
    """Test registration, lookup and freezing."""

    def test_register_and_lookup(self):
        registry = FunctionRegistry()
        registry.register(CallableDescriptor("greet", "Greets a player"))
        descriptor = registry.lookup("greet")
        assert descriptor.name == "greet"
        assert descriptor.docs == "Greets a player"

    def test_lookup_missing(self):
        assert FunctionRegistry().lookup("nothing") is None

    def test_duplicate_registration(self):
        registry = FunctionRegistry([CallableDescriptor("greet")])
        with pytest.raises(RegistryError):
            registry.register(CallableDescriptor("greet"))

    def test_register_after_freeze(self):
        registry = FunctionRegistry().freeze()
        assert registry.frozen
        with pytest.raises(RegistryError, match="frozen"):
            registry.register(CallableDescriptor("late"))

    def test_internal_functions_not_callable_by_name(self):
        registry = FunctionRegistry([
            CallableDescriptor("secret", internal=True),
            CallableDescriptor("public"),
        ])
        assert "secret" in registry
        assert not registry.is_callable_by_name("secret")
        assert registry.is_callable_by_name("public")
        assert not registry.is_callable_by_name("missing")

    def test_names_sorted(self):
        registry = FunctionRegistry([CallableDescriptor("b"), CallableDescriptor("a")])
        assert registry.names() == ["a", "b"]
        assert len(registry) == 2
        assert [d.name for d in registry] == ["b", "a"]


class TestDefaultRegistry:
    """Test the built-in registry."""

    def test_shared_and_frozen(self):
        registry = default_registry()
        assert registry is default_registry()
        assert registry.frozen

    def test_shared_registry_rejects_registration(self):
        with pytest.raises(RegistryError):
            default_registry().register(CallableDescriptor("late"))
        assert "late" not in default_registry()

    def test_script_functions(self):
        registry = default_registry()
        for name in ("msg", "die", "broadcast", "console", "array"):
            assert registry.is_callable_by_name(name)

    def test_compiler_internals(self):
        registry = default_registry()
        for name in ("p", "centry", "__autoconcat__", "sconcat", "__cbracket__", "__cbrace__", "dyn"):
            assert name in registry
            assert not registry.is_callable_by_name(name)

    def test_operator_functions(self):
        registry = default_registry()
        for name in ("add", "assign", "neg", "identity", "postinc", "pow", "snequals"):
            assert name in registry

    def test_builtin_names_unique(self):
        names = [d.name for d in builtin_descriptors()]
        assert len(names) == len(set(names))
