"""Trace Query - conversions between trace search conditions and query parameters"""

from .errors import (
    TraceQueryError,
    InvalidLookbackLabel,
    InvalidNumber,
    InvalidAutocompleteTag,
)
from .models import (
    ConditionKey,
    Condition,
    AutocompleteCondition,
    LookbackCondition,
    ApiQueryParameters,
    ExtractedConditions,
    LOOKBACK_DURATIONS,
    CUSTOM_LOOKBACK,
    lookback_duration_ms,
    to_condition,
)
from .query import (
    build_traces_api_query_parameters,
    extract_conditions_from_query_parameters,
    build_query_parameters,
    parse_int,
)
from .query_string import to_query_string, from_query_string

__all__ = [
    "TraceQueryError",
    "InvalidLookbackLabel",
    "InvalidNumber",
    "InvalidAutocompleteTag",
    "ConditionKey",
    "Condition",
    "AutocompleteCondition",
    "LookbackCondition",
    "ApiQueryParameters",
    "ExtractedConditions",
    "LOOKBACK_DURATIONS",
    "CUSTOM_LOOKBACK",
    "lookback_duration_ms",
    "to_condition",
    "build_traces_api_query_parameters",
    "extract_conditions_from_query_parameters",
    "build_query_parameters",
    "parse_int",
    "to_query_string",
    "from_query_string",
]

__version__ = "0.1.0"
