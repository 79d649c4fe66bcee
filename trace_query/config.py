"""Environment driven defaults for search state."""

import os

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv(usecwd=True), override=False)

# Used when a shared URL carries no limit / lookback
DEFAULT_LIMIT = int(os.getenv("TRACE_QUERY_DEFAULT_LIMIT", "10"))
DEFAULT_LOOKBACK = os.getenv("TRACE_QUERY_DEFAULT_LOOKBACK", "15m")
