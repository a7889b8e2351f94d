import pytest

from settingeval import EvaluatorRegistry, UnknownEvaluatorError, get_default_registry


def test_register_and_get_callable():
    registry = EvaluatorRegistry()
    registry.register("eq", lambda condition, value: condition == value)
    assert "eq" in registry
    assert registry.get("eq")("a", "a") is True


def test_register_replaces_existing():
    registry = EvaluatorRegistry()
    registry.register("x", lambda c, v: 1)
    registry.register("x", lambda c, v: 2)
    assert registry.get("x")(None, None) == 2
    assert len(registry) == 1


def test_register_protocol_instance():
    class Always:
        def evaluate(self, condition_value, context_value):
            return True

    registry = EvaluatorRegistry()
    registry.register("always", Always())
    assert registry.get("always")("a", "b") is True


def test_register_rejects_non_callables():
    with pytest.raises(TypeError):
        EvaluatorRegistry().register("bad", "not a function")


def test_unknown_name_raises():
    registry = EvaluatorRegistry()
    with pytest.raises(UnknownEvaluatorError):
        registry.get("missing")


def test_unregister():
    registry = EvaluatorRegistry.from_mapping({"a": lambda c, v: True, "b": lambda c, v: False})
    registry.unregister("a")
    registry.unregister("not-there")
    assert registry.names() == ["b"]


def test_default_registry_builtins():
    registry = get_default_registry()
    assert registry is get_default_registry()
    assert {"contains", "prefix"} <= set(registry.names())

    contains = registry.get("contains")
    assert contains("en", "en-US")
    assert contains("beta", ["alpha", "beta"])
    assert not contains("en", None)

    prefix = registry.get("prefix")
    assert prefix("en", "en-US")
    assert not prefix("US", "en-US")
    assert not prefix("en", 5)
