"""lazycloud constants: filesystem layout, timings and limits."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

CONFIG_DIR_NAME = "lazycloud"
CONFIG_FILENAME = "config.toml"
LOG_FILENAME = "lazycloud.log"
GCLOUD_CONFIG_DIR = "gcloud"

# ---------------------------------------------------------------------------
# Timings and limits
# ---------------------------------------------------------------------------

DEFAULT_TICK_INTERVAL_MS = 100
MIN_TICK_INTERVAL_MS = 50
MAX_TICK_INTERVAL_MS = 1000

NOTICE_TICKS = 30  # ~3s at the default tick interval
COMMAND_HISTORY_SIZE = 10
PAGE_STEP = 10
GCLOUD_TIMEOUT_SECONDS = 30.0
