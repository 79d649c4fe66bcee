"""Unit tests for the condition and lookback models."""

import math

import pytest
from pydantic import ValidationError

from trace_query import config
from trace_query.models import (
    CUSTOM_LOOKBACK,
    LOOKBACK_DURATIONS,
    AutocompleteCondition,
    Condition,
    ConditionKey,
    ExtractedConditions,
    LookbackCondition,
    InvalidLookbackLabel,
    is_lookback_label,
    lookback_duration_ms,
    to_condition,
)


class TestLookbackTable:
    """Tests for the relative lookback preset table."""

    @pytest.mark.parametrize("label, expected", [
        ("1m", 60_000),
        ("15m", 900_000),
        ("1h", 3_600_000),
        ("1d", 86_400_000),
        ("7d", 604_800_000),
    ])
    def test_known_presets(self, label, expected):
        assert lookback_duration_ms(label) == expected

    def test_custom_has_no_duration(self):
        """custom is a label but not a preset."""
        assert is_lookback_label(CUSTOM_LOOKBACK)
        with pytest.raises(InvalidLookbackLabel):
            lookback_duration_ms(CUSTOM_LOOKBACK)

    def test_unknown_label(self):
        assert not is_lookback_label("3w")
        with pytest.raises(InvalidLookbackLabel, match="3w"):
            lookback_duration_ms("3w")

    def test_invalid_label_is_a_value_error(self):
        """Callers catching ValueError also catch unknown labels."""
        with pytest.raises(ValueError):
            lookback_duration_ms("never")

    def test_presets_are_ascending(self):
        durations = list(LOOKBACK_DURATIONS.values())
        assert durations == sorted(durations)


class TestToCondition:
    """Tests for dict -> condition variant dispatch."""

    def test_well_known_key(self):
        condition = to_condition({"key": "serviceName", "value": "frontend"})

        assert isinstance(condition, Condition)
        assert condition.key is ConditionKey.SERVICE_NAME

    def test_dynamic_key(self):
        condition = to_condition({"key": "environment", "value": "prod"})

        assert condition == AutocompleteCondition(key="environment", value="prod")

    def test_models_pass_through(self):
        condition = Condition(key=ConditionKey.TAGS, value="error")
        assert to_condition(condition) is condition

    def test_duration_keeps_int(self):
        """Values are not coerced between str and int."""
        assert to_condition({"key": "minDuration", "value": 10}).value == 10
        assert to_condition({"key": "minDuration", "value": "10"}).value == "10"

    def test_conditions_are_hashable(self):
        """Frozen models can be compared as a multiset."""
        a = Condition(key="tags", value="error")
        b = Condition(key=ConditionKey.TAGS, value="error")
        assert a == b
        assert len({a, b}) == 1

    def test_conditions_are_immutable(self):
        condition = Condition(key="spanName", value="get")
        with pytest.raises(ValidationError):
            condition.value = "post"


class TestLookbackCondition:
    """Tests for LookbackCondition aliases and dumping."""

    def test_accepts_camel_case_and_snake_case(self):
        by_alias = LookbackCondition.model_validate({"value": "1h", "endTs": 5})
        by_name = LookbackCondition(value="1h", end_ts=5)

        assert by_alias == by_name

    def test_to_dict_omits_absent_start(self):
        lookback = LookbackCondition(value="1h", end_ts=5)
        assert lookback.to_dict() == {"value": "1h", "endTs": 5}

    def test_custom_to_dict(self):
        lookback = LookbackCondition(value="custom", end_ts=10, start_ts=4)

        assert lookback.is_custom
        assert lookback.to_dict() == {"value": "custom", "endTs": 10, "startTs": 4}

    def test_missing_end_ts_is_nan(self):
        """A lookback without endTs validates and carries NaN."""
        lookback = LookbackCondition.model_validate({"value": "1h"})

        assert math.isnan(lookback.end_ts)
        assert lookback.start_ts is None


class TestExtractedConditionsDefaults:
    """Tests for ExtractedConditions.with_defaults()."""

    def test_fills_missing_limit_and_lookback(self, monkeypatch, end_ts):
        monkeypatch.setattr(config, "DEFAULT_LIMIT", 25)
        monkeypatch.setattr(config, "DEFAULT_LOOKBACK", "30m")

        result = ExtractedConditions().with_defaults(end_ts=end_ts)

        assert result.limit_condition == 25
        assert result.lookback_condition == LookbackCondition(value="30m", end_ts=end_ts)

    def test_keeps_existing_values(self, end_ts):
        lookback = LookbackCondition(value="1h", end_ts=end_ts)
        extracted = ExtractedConditions(limit_condition=3, lookback_condition=lookback)

        result = extracted.with_defaults()

        assert result.limit_condition == 3
        assert result.lookback_condition is lookback

    def test_default_lookback_ends_now(self, monkeypatch):
        monkeypatch.setattr("trace_query.models.now_ms", lambda: 1000)

        result = ExtractedConditions(limit_condition=1).with_defaults()

        assert result.lookback_condition.end_ts == 1000
