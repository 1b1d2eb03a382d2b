"""Wall-clock helpers. All persisted timestamps are epoch milliseconds."""

import time

ONE_HOUR_MS = 60 * 60 * 1000
ONE_DAY_MS = 24 * ONE_HOUR_MS


def now_ms() -> int:
    return int(time.time() * 1000)
