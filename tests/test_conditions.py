import pytest

from settingeval import (
    ConditionSyntaxError,
    CustomPredicate,
    MembershipMatch,
    PercentageMatch,
    RandomPercentageMatch,
    ScalarMatch,
    SettingDependency,
    UnsupportedFieldTypeError,
    parse_condition,
)
from settingeval.conditions import parse_conditions
from settingeval.utils import normalize_seed, strict_equals


def test_reserved_keys_select_variants():
    assert parse_condition("setting", "foo") == SettingDependency(names=("foo",))
    assert parse_condition("setting", ["foo", "bar"]) == SettingDependency(names=("foo", "bar"))
    assert parse_condition("percentage", 25) == PercentageMatch(percentage=25)
    assert parse_condition("randomPercentage", 2.5) == RandomPercentageMatch(percentage=2.5)
    assert parse_condition(
        "customCondition", {"evaluator": "locale", "dimensionValue": "en"}
    ) == CustomPredicate(evaluator="locale", dimension_value="en")


def test_generic_keys_select_scalar_or_membership():
    assert parse_condition("farm", "111") == ScalarMatch(key="farm", expected="111")
    assert parse_condition("dogfood", False) == ScalarMatch(key="dogfood", expected=False)
    assert parse_condition("farm", ["111", 222]) == MembershipMatch(key="farm", options=("111", 222))


@pytest.mark.parametrize("spec", [{}, {"a": 1}, None, [{}], [None], [["nested"]]])
def test_unsupported_generic_values(spec):
    with pytest.raises(UnsupportedFieldTypeError) as exc_info:
        parse_condition("farm", spec)
    assert exc_info.value.key == "farm"


@pytest.mark.parametrize(
    "key,spec",
    [
        ("percentage", -1),
        ("percentage", 101),
        ("percentage", "50"),
        ("percentage", True),
        ("randomPercentage", None),
        ("setting", ""),
        ("setting", ["foo", 1]),
        ("setting", {"name": "foo"}),
        ("customCondition", "locale"),
        ("customCondition", {"dimensionValue": "en"}),
    ],
)
def test_malformed_reserved_keys(key, spec):
    with pytest.raises(ConditionSyntaxError):
        parse_condition(key, spec)


def test_parse_conditions_skips_value():
    conditions = parse_conditions({"value": {"complex": True}, "farm": "1", "percentage": 10})
    assert conditions == (ScalarMatch(key="farm", expected="1"), PercentageMatch(percentage=10))


def test_strict_equals():
    assert strict_equals("a", "a")
    assert strict_equals(2, 2.0)
    assert strict_equals(False, False)
    assert not strict_equals(False, 0)
    assert not strict_equals(1, True)
    assert not strict_equals(None, "None")
    assert strict_equals(None, None)


def test_normalize_seed():
    assert normalize_seed("abc") == "abc"
    assert normalize_seed(42) == "42"
    assert normalize_seed(42.0) == "42"
    assert normalize_seed(0.5) == "0.5"
    assert normalize_seed(None) is None
    assert normalize_seed(False) is None
    assert normalize_seed(float("nan")) is None
    assert normalize_seed(["a"]) is None
