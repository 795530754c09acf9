"""Tests for structured logging and request_id propagation."""

import json
import logging

from creatorhub.core.logging import JsonFormatter, latency_bucket_ms, log_event
from creatorhub.models.user import Role

ALL_FLAGS = ("regularContent", "premiumVideos", "vrContent", "threeSixtyContent", "liveRooms", "interactiveModels")


def test_request_id_in_response_and_logs(client, caplog):
    with caplog.at_level(logging.INFO, logger="creatorhub"):
        response = client.get("/healthz")
    rid = response.headers.get("x-request-id")
    assert rid
    records = [r for r in caplog.records if getattr(r, "request_id", None) == rid]
    assert records, "Expected logs to contain request_id from response"
    assert any(r.getMessage() == "request.complete" for r in records)


def test_domain_events_carry_request_and_plan_ids(client, make_user, auth_headers, caplog):
    creator = make_user(Role.CREATOR)
    body = {
        "name": "Gold",
        "price": 12,
        "features": [],
        "intervalInDays": 30,
        "contentAccess": {flag: True for flag in ALL_FLAGS},
    }
    headers = {**auth_headers(creator), "X-Request-Id": "rid-plan-create"}
    with caplog.at_level(logging.INFO, logger="creatorhub"):
        resp = client.post("/api/plans", json=body, headers=headers)

    created = [r for r in caplog.records if r.getMessage() == "plan.created"]
    assert len(created) == 1
    assert created[0].request_id == "rid-plan-create"
    assert created[0].plan_id == resp.json()["id"]
    assert created[0].user_id == creator.id


def test_auth_failures_are_logged_with_reason(client, caplog):
    with caplog.at_level(logging.WARNING, logger="creatorhub"):
        client.get("/api/plans", headers={"Authorization": "Token nope"})
    rejected = [r for r in caplog.records if r.getMessage() == "auth.rejected"]
    assert rejected
    assert rejected[0].event_type == "auth.malformed_header"


def test_json_formatter_includes_structured_fields():
    record = logging.LogRecord("creatorhub", logging.INFO, __file__, 1, "plan.deleted", None, None)
    record.request_id = "rid-1"
    record.plan_id = "p1"
    record.event_type = "plan.deleted"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "plan.deleted"
    assert payload["request_id"] == "rid-1"
    assert payload["plan_id"] == "p1"
    assert payload["event_type"] == "plan.deleted"
    assert "user_id" not in payload
    assert payload["timestamp"].endswith("Z")


def test_latency_buckets():
    assert latency_bucket_ms(None) == "unknown"
    assert latency_bucket_ms(5) == "<10ms"
    assert latency_bucket_ms(50) == "10-100ms"
    assert latency_bucket_ms(2500) == ">=1000ms"


def test_log_event_redacts_credentials_and_keeps_event_fields(caplog):
    with caplog.at_level(logging.INFO, logger="creatorhub"):
        log_event(
            "info",
            "content.purchased",
            user_id="u1",
            event_type="content.purchased",
            extra={"content_id": "c1", "amount": 3.5, "access_token": "eyJ...", "module": "clash"},
        )
    record = next(r for r in caplog.records if r.getMessage() == "content.purchased")
    assert record.content_id == "c1"
    assert record.amount == 3.5
    assert record.access_token == "<redacted>"
    assert record.ctx_module == "clash"

    payload = json.loads(JsonFormatter().format(record))
    assert payload["content_id"] == "c1"
    assert payload["user_id"] == "u1"
    assert "plan_id" not in payload
