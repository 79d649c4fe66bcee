"""Tests for environment driven defaults."""

import importlib
from unittest.mock import patch

from trace_query import config


class TestConfig:

    def test_defaults(self):
        # clear=True drops any TRACE_QUERY_* vars from the developer's shell
        with patch.dict("os.environ", {}, clear=True), patch("dotenv.load_dotenv"):
            reloaded = importlib.reload(config)

        assert reloaded.DEFAULT_LIMIT == 10
        assert reloaded.DEFAULT_LOOKBACK == "15m"

    def test_reads_environment(self):
        env = {"TRACE_QUERY_DEFAULT_LIMIT": "50", "TRACE_QUERY_DEFAULT_LOOKBACK": "1h"}
        with patch.dict("os.environ", env, clear=True):
            reloaded = importlib.reload(config)

        assert reloaded.DEFAULT_LIMIT == 50
        assert reloaded.DEFAULT_LOOKBACK == "1h"

    def teardown_method(self):
        importlib.reload(config)
