"""Exceptions raised by the trace query adapter."""


class TraceQueryError(Exception):
    """Base class for all adapter errors."""


class InvalidLookbackLabel(TraceQueryError, ValueError):
    """Raised when a relative lookback label is not in the duration table."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Unknown lookback label: {label!r}")


class InvalidNumber(TraceQueryError, ValueError):
    """Raised in strict mode when a numeric query parameter does not parse."""

    def __init__(self, field: str, raw):
        self.field = field
        self.raw = raw
        super().__init__(f"Invalid number for {field}: {raw!r}")


class InvalidAutocompleteTag(TraceQueryError, ValueError):
    """Raised in strict mode when an autocomplete tag token has no '='."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Autocomplete tag must look like name=value, got {token!r}")
