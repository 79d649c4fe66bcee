"""Data model shared by the forward and reverse query converters.

A search form is described by three things:
    - an ordered list of conditions (well-known keys plus dynamic autocomplete tags)
    - a lookback window, either a named preset or an explicit custom range
    - a limit on the number of traces to fetch
"""

import logging
import math
import time
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, TypedDict, Union

from pydantic import BaseModel, ConfigDict, Field

from . import config
from .errors import InvalidLookbackLabel

logger = logging.getLogger(__name__)

# Tokens of both `tags` and `autocompleteTags` are joined with this, and so is
# the annotationQuery the backend expects.
TAG_SEPARATOR = " and "

CUSTOM_LOOKBACK = "custom"

# Relative lookback presets offered by the search form, in milliseconds.
# Add new presets here only; both converters read this table.
LOOKBACK_DURATIONS: Dict[str, int] = {
    "1m": 60 * 1000,
    "5m": 5 * 60 * 1000,
    "15m": 15 * 60 * 1000,
    "30m": 30 * 60 * 1000,
    "1h": 60 * 60 * 1000,
    "2h": 2 * 60 * 60 * 1000,
    "6h": 6 * 60 * 60 * 1000,
    "12h": 12 * 60 * 60 * 1000,
    "1d": 24 * 60 * 60 * 1000,
    "2d": 2 * 24 * 60 * 60 * 1000,
    "7d": 7 * 24 * 60 * 60 * 1000,
}

Number = Union[int, float]  # float only ever carries NaN from permissive parsing


def lookback_duration_ms(label: str) -> int:
    """Look up the duration of a relative lookback preset.

    Raises
    ------
    InvalidLookbackLabel
        If `label` is not a preset (``"custom"`` included, it has no fixed duration).
    """
    try:
        return LOOKBACK_DURATIONS[label]
    except KeyError:
        raise InvalidLookbackLabel(label) from None


def is_lookback_label(label: str) -> bool:
    """True for every label the search form can produce, including ``custom``."""
    return label == CUSTOM_LOOKBACK or label in LOOKBACK_DURATIONS


class ConditionKey(str, Enum):
    """Well-known condition keys. Anything else is an autocomplete tag name."""

    SERVICE_NAME = "serviceName"
    REMOTE_SERVICE_NAME = "remoteServiceName"
    SPAN_NAME = "spanName"
    MIN_DURATION = "minDuration"
    MAX_DURATION = "maxDuration"
    TAGS = "tags"


NAME_KEYS = (ConditionKey.SERVICE_NAME, ConditionKey.REMOTE_SERVICE_NAME, ConditionKey.SPAN_NAME)
DURATION_KEYS = (ConditionKey.MIN_DURATION, ConditionKey.MAX_DURATION)

_WELL_KNOWN_KEYS = {key.value for key in ConditionKey}


class Condition(BaseModel):
    """A filter on one of the well-known keys.

    Durations are integer microseconds. A `tags` value is a single raw tag
    token, either ``name`` or ``name=value``, and is never split further.
    """

    model_config = ConfigDict(frozen=True)

    key: ConditionKey
    value: Union[int, float, str]


class AutocompleteCondition(BaseModel):
    """A tag filter picked from an autocomplete control.

    `key` is the tag name itself. `value` is None only when a malformed
    ``autocompleteTags`` token without ``=`` was extracted permissively.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    value: Optional[str]


AnyCondition = Union[Condition, AutocompleteCondition]


def to_condition(item: Union[AnyCondition, Mapping[str, Any]]) -> AnyCondition:
    """Coerce a ``{key, value}`` mapping into the matching condition variant."""
    if isinstance(item, (Condition, AutocompleteCondition)):
        return item
    key = item["key"]
    if isinstance(key, ConditionKey) or key in _WELL_KNOWN_KEYS:
        return Condition(key=key, value=item["value"])
    return AutocompleteCondition(key=key, value=item["value"])


class LookbackCondition(BaseModel):
    """Time window of a search, always ending at `end_ts` (epoch ms).

    For ``value == "custom"`` the window starts at `start_ts` (epoch ms);
    otherwise its length comes from the preset table. A missing
    `end_ts` is NaN rather than a validation error.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    value: str
    end_ts: Number = Field(math.nan, alias="endTs")
    start_ts: Optional[Number] = Field(None, alias="startTs")

    @property
    def is_custom(self) -> bool:
        return self.value == CUSTOM_LOOKBACK

    def to_dict(self) -> Dict[str, Any]:
        """Dump with camelCase keys, leaving out an absent startTs."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ApiQueryParameters(TypedDict, total=False):
    """Query parameters of the backend's trace search endpoint."""

    serviceName: str
    remoteServiceName: str
    spanName: str
    minDuration: int
    maxDuration: int
    annotationQuery: str
    endTs: Number
    lookback: Number
    limit: int


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class ExtractedConditions(BaseModel):
    """Search form state recovered from URL query parameters."""

    conditions: List[AnyCondition] = Field(default_factory=list)
    limit_condition: Optional[Number] = None
    lookback_condition: Optional[LookbackCondition] = None

    def with_defaults(self, end_ts: Optional[int] = None) -> "ExtractedConditions":
        """Fill an absent limit or lookback from configuration.

        Parameters
        ----------
        end_ts : Optional[int]
            End of the default lookback window in epoch ms. Defaults to now.
        """
        update: Dict[str, Any] = {}
        if self.limit_condition is None:
            update["limit_condition"] = config.DEFAULT_LIMIT
        if self.lookback_condition is None:
            update["lookback_condition"] = LookbackCondition(
                value=config.DEFAULT_LOOKBACK,
                end_ts=end_ts if end_ts is not None else now_ms(),
            )
            logger.debug(f"Using default lookback {config.DEFAULT_LOOKBACK}")
        if not update:
            return self
        return self.model_copy(update=update)
