from __future__ import annotations

import json
import logging
from typing import Any

DEFAULT_TELEMETRY_TAG = "answer-pipeline"


def build_graph_invoke_config(request_id: str, focus_mode: str) -> dict[str, Any]:
    return {
        "tags": [DEFAULT_TELEMETRY_TAG],
        "metadata": {
            "request_id": request_id,
            "focus_mode": focus_mode,
            "component": "retrieval_graph",
        },
    }


def emit_pipeline_telemetry(
    request_id: str,
    focus_mode: str,
    events: Any,
    logger: logging.Logger | None = None,
) -> None:
    active_logger = logger or logging.getLogger(__name__)
    for event in _events(events):
        payload = {
            "request_id": request_id,
            "focus_mode": focus_mode,
            **event,
        }
        active_logger.info("pipeline_event %s", json.dumps(payload, sort_keys=True))


def _events(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [event for event in value if isinstance(event, dict)]
