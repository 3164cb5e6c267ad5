from __future__ import annotations

DEFAULT_CONFIG_FILE = "~/.photon-config"

DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0

TASK_POLL_INTERVAL_SECONDS = 0.5
TASK_TIMEOUT_SECONDS = 30 * 60

ENTITY_POLL_INTERVAL_SECONDS = 2.0
ENTITY_TIMEOUT_SECONDS = 60 * 60
ENTITY_RETRY_BUDGET = 3

PROGRESS_REFRESH_SECONDS = 0.5
