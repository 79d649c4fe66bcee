"""Conversions between search conditions and query parameters.

Three mappings live here:
    - build_traces_api_query_parameters: conditions -> backend search API params
    - extract_conditions_from_query_parameters: URL params -> conditions
    - build_query_parameters: conditions -> URL params (inverse of extraction)

All of them are pure functions over the models in `trace_query.models`.
"""

import logging
import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .errors import InvalidAutocompleteTag, InvalidNumber
from .models import (
    CUSTOM_LOOKBACK,
    DURATION_KEYS,
    NAME_KEYS,
    TAG_SEPARATOR,
    AnyCondition,
    ApiQueryParameters,
    AutocompleteCondition,
    Condition,
    ConditionKey,
    ExtractedConditions,
    LookbackCondition,
    Number,
    is_lookback_label,
    lookback_duration_ms,
    to_condition,
)

logger = logging.getLogger(__name__)

ConditionLike = Union[AnyCondition, Mapping[str, Any]]
LookbackLike = Union[LookbackCondition, Mapping[str, Any]]

AUTOCOMPLETE_TAGS = "autocompleteTags"

# Same leniency as JavaScript's parseInt: leading blanks, a sign, then digits.
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_INT_STRICT = re.compile(r"\s*[+-]?\d+\s*")


def parse_int(raw: Any, field: str = "value", strict: bool = False) -> Number:
    """Parse an integer out of URL text.

    Parameters
    ----------
    raw : Any
        Usually a string. Integers are returned as-is and None is treated as
        missing text.
    field : str
        Name of the parameter, only used in errors and logs.
    strict : bool
        Raise instead of returning NaN, and reject trailing garbage.

    Returns
    -------
    Number
        The parsed integer, or ``math.nan`` when nothing parses.

    Raises
    ------
    InvalidNumber
        In strict mode, when `raw` is not an integer literal.
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    text = "" if raw is None else str(raw)

    if strict:
        if not _INT_STRICT.fullmatch(text):
            raise InvalidNumber(field, raw)
        return int(text)

    match = _INT_PREFIX.match(text)
    if match is None:
        logger.debug(f"Could not parse {field}={raw!r}, using NaN")
        return math.nan
    return int(match.group(1))


def _to_lookback(lookback_condition: LookbackLike) -> LookbackCondition:
    if isinstance(lookback_condition, LookbackCondition):
        lookback = lookback_condition
    else:
        lookback = LookbackCondition.model_validate(lookback_condition)
    if isinstance(lookback.end_ts, float) and math.isnan(lookback.end_ts):
        logger.warning("Lookback without endTs, endTs and lookback will be NaN")
    return lookback


def _lookback_ms(lookback: LookbackCondition) -> Number:
    if not lookback.is_custom:
        return lookback_duration_ms(lookback.value)
    if lookback.start_ts is None:
        logger.warning("Custom lookback without startTs, lookback will be NaN")
        return math.nan
    return lookback.end_ts - lookback.start_ts


def build_traces_api_query_parameters(
    conditions: Iterable[ConditionLike],
    lookback_condition: LookbackLike,
    limit: int,
) -> ApiQueryParameters:
    """Build the backend trace search parameters for a search form.

    Every `tags` condition contributes one token to ``annotationQuery``. All
    other conditions, autocomplete tags included, are copied under their own
    key without any coercion.

    Parameters
    ----------
    conditions : Iterable[ConditionLike]
        Conditions or plain ``{"key": ..., "value": ...}`` mappings.
    lookback_condition : LookbackLike
        Preset or custom time window.
    limit : int
        Maximum number of traces, copied verbatim.

    Returns
    -------
    ApiQueryParameters
        Only keys with a value are present; there are no None placeholders.

    Raises
    ------
    InvalidLookbackLabel
        If a non-custom lookback label is not a known preset.
    """
    params: Dict[str, Any] = {}
    tag_tokens: List[str] = []

    for item in conditions:
        condition = to_condition(item)
        if isinstance(condition, Condition) and condition.key is ConditionKey.TAGS:
            tag_tokens.append(str(condition.value))
            continue
        if condition.value is None:
            continue
        key = condition.key.value if isinstance(condition, Condition) else condition.key
        params[key] = condition.value

    if tag_tokens:
        params["annotationQuery"] = TAG_SEPARATOR.join(tag_tokens)

    lookback = _to_lookback(lookback_condition)
    params["endTs"] = lookback.end_ts
    params["lookback"] = _lookback_ms(lookback)
    params["limit"] = limit

    logger.debug(f"Built trace search params: {params}")
    return params


def _split_tokens(raw: str) -> List[str]:
    return str(raw).split(TAG_SEPARATOR)


def extract_conditions_from_query_parameters(
    query_parameters: Mapping[str, Any],
    existing_autocomplete_keys: Optional[Iterable[str]] = None,
    strict: bool = False,
) -> ExtractedConditions:
    """Rebuild search form state from URL query parameters.

    Conditions come out in a fixed order: service/remote service/span names,
    durations, `tags` tokens, then autocomplete tags.

    Parameters
    ----------
    query_parameters : Mapping[str, Any]
        String values as parsed from a URL query string.
    existing_autocomplete_keys : Optional[Iterable[str]]
        Autocomplete tag names the caller already knows about. The output does
        not depend on it; unknown names are only logged. None or an empty
        list disables that check.
    strict : bool
        Raise `InvalidNumber` / `InvalidAutocompleteTag` instead of returning
        NaN or a None value.

    Returns
    -------
    ExtractedConditions
        Conditions plus limit and lookback, each None when absent.
    """
    conditions: List[AnyCondition] = []

    for key in NAME_KEYS:
        if key.value in query_parameters:
            conditions.append(Condition(key=key, value=query_parameters[key.value]))

    for key in DURATION_KEYS:
        if key.value in query_parameters:
            value = parse_int(query_parameters[key.value], key.value, strict)
            conditions.append(Condition(key=key, value=value))

    if ConditionKey.TAGS.value in query_parameters:
        # Tokens stay opaque, "name=value" is not split here
        for token in _split_tokens(query_parameters[ConditionKey.TAGS.value]):
            conditions.append(Condition(key=ConditionKey.TAGS, value=token))

    if AUTOCOMPLETE_TAGS in query_parameters:
        known_keys = set(existing_autocomplete_keys or [])
        for token in _split_tokens(query_parameters[AUTOCOMPLETE_TAGS]):
            name, sep, value = token.partition("=")
            if not sep:
                if strict:
                    raise InvalidAutocompleteTag(token)
                logger.warning(f"Autocomplete tag without value: {token!r}")
                conditions.append(AutocompleteCondition(key=name, value=None))
                continue
            if known_keys and name not in known_keys:
                logger.debug(f"Autocomplete tag {name!r} is not among existing keys")
            conditions.append(AutocompleteCondition(key=name, value=value))

    limit_condition = None
    if "limit" in query_parameters:
        limit_condition = parse_int(query_parameters["limit"], "limit", strict)

    lookback_condition = None
    if "lookback" in query_parameters:
        label = query_parameters["lookback"]
        end_ts = parse_int(query_parameters.get("endTs"), "endTs", strict)
        if label == CUSTOM_LOOKBACK:
            start_ts = parse_int(query_parameters.get("startTs"), "startTs", strict)
            lookback_condition = LookbackCondition(value=label, end_ts=end_ts, start_ts=start_ts)
        else:
            if not is_lookback_label(label):
                logger.warning(f"Unknown lookback label in query parameters: {label!r}")
            lookback_condition = LookbackCondition(value=label, end_ts=end_ts)

    return ExtractedConditions(
        conditions=conditions,
        limit_condition=limit_condition,
        lookback_condition=lookback_condition,
    )


def build_query_parameters(
    conditions: Iterable[ConditionLike],
    lookback_condition: Optional[LookbackLike] = None,
    limit: Optional[int] = None,
) -> Dict[str, str]:
    """Serialize search form state into URL query parameters.

    This is the format `extract_conditions_from_query_parameters` reads back:
    `tags` tokens and autocomplete tags are kept apart, and the lookback is
    stored as its label rather than a duration.
    """
    params: Dict[str, str] = {}
    tag_tokens: List[str] = []
    autocomplete_tokens: List[str] = []

    for item in conditions:
        condition = to_condition(item)
        if isinstance(condition, AutocompleteCondition):
            if condition.value is None:
                autocomplete_tokens.append(condition.key)
            else:
                autocomplete_tokens.append(f"{condition.key}={condition.value}")
        elif condition.key is ConditionKey.TAGS:
            tag_tokens.append(str(condition.value))
        else:
            params[condition.key.value] = str(condition.value)

    if tag_tokens:
        params[ConditionKey.TAGS.value] = TAG_SEPARATOR.join(tag_tokens)
    if autocomplete_tokens:
        params[AUTOCOMPLETE_TAGS] = TAG_SEPARATOR.join(autocomplete_tokens)

    if limit is not None:
        params["limit"] = str(limit)

    if lookback_condition is not None:
        lookback = _to_lookback(lookback_condition)
        params["lookback"] = lookback.value
        params["endTs"] = str(lookback.end_ts)
        if lookback.is_custom and lookback.start_ts is not None:
            params["startTs"] = str(lookback.start_ts)

    return params
