"""Shared pytest fixtures for trace query tests."""

import pytest

END_TS = 1547098357716


@pytest.fixture
def end_ts():
    """Fixed epoch-ms end of the search window"""
    return END_TS


@pytest.fixture
def simple_conditions():
    """Conditions on every well-known non-tag key, as the search form sends them"""
    return [
        {"key": "serviceName", "value": "serviceA"},
        {"key": "remoteServiceName", "value": "serviceB"},
        {"key": "spanName", "value": "spanA"},
        {"key": "minDuration", "value": 10},
        {"key": "maxDuration", "value": 100},
    ]


@pytest.fixture
def hour_lookback(end_ts):
    """One hour preset lookback"""
    return {"value": "1h", "endTs": end_ts}


@pytest.fixture
def custom_lookback(end_ts):
    """Custom lookback 6 ms long"""
    return {"value": "custom", "endTs": end_ts, "startTs": end_ts - 6}
