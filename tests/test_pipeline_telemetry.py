import logging

from nalanda.pipeline.telemetry import build_graph_invoke_config, emit_pipeline_telemetry


def test_build_graph_invoke_config_includes_tags_and_request_id() -> None:
    config = build_graph_invoke_config("req-123", "college_finder")

    assert config["tags"] == ["answer-pipeline"]
    assert config["metadata"]["request_id"] == "req-123"
    assert config["metadata"]["focus_mode"] == "college_finder"


def test_emit_pipeline_telemetry_logs_structured_events(caplog) -> None:
    events = [
        {"event": "search_completed", "engines": ["reddit"], "count": 4},
        "not-an-event",
        {"event": "rerank_completed", "strategy": "embedding_cosine", "count": 2},
    ]

    logger = logging.getLogger("test.telemetry")
    with caplog.at_level(logging.INFO, logger="test.telemetry"):
        emit_pipeline_telemetry("req-123", "college_finder", events, logger=logger)

    assert len(caplog.messages) == 2
    assert all(message.startswith("pipeline_event ") for message in caplog.messages)
    assert '"request_id": "req-123"' in caplog.messages[0]
    assert '"engines": ["reddit"]' in caplog.messages[0]
    assert '"strategy": "embedding_cosine"' in caplog.messages[1]


def test_emit_pipeline_telemetry_ignores_missing_events(caplog) -> None:
    logger = logging.getLogger("test.telemetry")
    with caplog.at_level(logging.INFO, logger="test.telemetry"):
        emit_pipeline_telemetry("req-1", "sop_builder", None, logger=logger)

    assert caplog.messages == []
