import logging

import pytest

from settingeval import CyclicDependencyError, EntryLoadError, SettingEvaluator, SettingsResolver, UnknownSettingError


def configuration():
    return [
        {
            "setting": "checkout",
            "value": False,
            "except": [{"value": True, "setting": ["payments", "beta"]}],
        },
        {"setting": "payments", "value": True},
        {"setting": "beta", "value": False, "except": [{"value": True, "farm": ["111", "222"]}]},
        {"setting": "unrelated", "value": "x"},
    ]


def test_order_puts_dependencies_first():
    resolver = SettingsResolver(configuration())
    order = resolver.order()
    assert order.index("payments") < order.index("checkout")
    assert order.index("beta") < order.index("checkout")
    assert set(order) == {"checkout", "payments", "beta", "unrelated"}


def test_dependencies():
    resolver = SettingsResolver(configuration())
    assert resolver.dependencies("checkout") == ["payments", "beta"]
    assert resolver.dependencies("payments") == []


def test_resolve_feeds_answers_forward():
    resolver = SettingsResolver(configuration())
    assert resolver.resolve({"farm": "111"})["checkout"].value is True
    assert resolver.resolve({"farm": "333"})["checkout"].value is False


def test_resolve_applies_overrides_to_dependencies():
    resolver = SettingsResolver(configuration())
    answers = resolver.resolve({"farm": "111"}, {"payments": False})
    assert answers["payments"].source == "override"
    assert answers["checkout"].value is False


def test_resolve_only_evaluates_needed_settings():
    resolver = SettingsResolver(configuration())
    answers = resolver.resolve({"farm": "111"}, only="checkout")
    assert set(answers) == {"checkout", "payments", "beta"}
    assert answers["checkout"].value is True


def test_resolve_only_unknown_setting():
    with pytest.raises(UnknownSettingError):
        SettingsResolver(configuration()).resolve(only="nope")


def test_cycle_is_detected():
    entries = [
        {"setting": "a", "value": 1, "except": [{"value": 2, "setting": "b"}]},
        {"setting": "b", "value": 1, "except": [{"value": 2, "setting": "c"}]},
        {"setting": "c", "value": 1, "except": [{"value": 2, "setting": "a"}]},
    ]
    with pytest.raises(CyclicDependencyError) as exc_info:
        SettingsResolver(entries)
    assert exc_info.value.cycle == ["a", "b", "c", "a"]


def test_self_dependency_is_a_cycle():
    with pytest.raises(CyclicDependencyError):
        SettingsResolver([{"setting": "a", "value": 1, "except": [{"value": 2, "setting": "a"}]}])


def test_unknown_dependency_is_falsy(caplog):
    entries = [{"setting": "a", "value": "default", "except": [{"value": "on", "setting": "ghost"}]}]
    with caplog.at_level(logging.WARNING, logger="settingeval.resolver"):
        resolver = SettingsResolver(entries)
    assert "ghost" in caplog.text
    assert resolver.resolve()["a"].value == "default"


def test_duplicate_settings_rejected():
    with pytest.raises(EntryLoadError):
        SettingsResolver([{"setting": "a"}, {"setting": "a"}])


def test_resolver_uses_given_evaluator():
    entries = [{"setting": "r", "value": False, "except": [{"value": True, "randomPercentage": 50}]}]
    resolver = SettingsResolver(entries, SettingEvaluator(random=lambda: 0.1))
    assert resolver.resolve()["r"].value is True


def test_override_of_unconfigured_dependency_is_used():
    entries = [{"setting": "a", "value": "off", "except": [{"value": "on", "setting": "ghost"}]}]
    resolver = SettingsResolver(entries)
    assert resolver.resolve({}, {"ghost": True})["a"].value == "on"
    assert resolver.resolve({}, {"ghost": False})["a"].value == "off"
    assert "ghost" not in resolver.resolve({}, {"ghost": True})
