"""Tests for the JSON and GraphQL endpoints."""

from datetime import date

import pytest
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from conftest import KNOWN_VALID, REFERENCE_DAY
from zk_age_verify.api import create_app
from zk_age_verify.constants import (
    MSG_AADHAAR_REQUIRED,
    MSG_COMPLETED,
    MSG_GRAPHQL_STATUS,
    MSG_INTERNAL_ERROR,
    MSG_INVALID_BODY,
    MSG_INVALID_FORMAT,
)
from zk_age_verify.pipeline import AgeVerificationPipeline
from zk_age_verify.privacy import Base64Encoder
from zk_age_verify.registry import StaticRegistry

VERIFY_URL = "/api/kyc/verify"
GRAPHQL_URL = "/api/graphql"

VERIFY_MUTATION = """
mutation Verify($aadhaar: String!) {
  verifyAge(aadhaar: $aadhaar) { success isAdult message }
}
"""


class ExplodingPipeline:
    async def verify_age(self, raw_identity_number):
        raise RuntimeError(f"fault while handling {raw_identity_number}")


class UnreadableResult:
    def __init__(self, raw_identity_number):
        self.raw_identity_number = raw_identity_number

    @property
    def success(self):
        raise RuntimeError(f"unreadable result for {self.raw_identity_number}")


class UnreadableResultPipeline:
    async def verify_age(self, raw_identity_number):
        return UnreadableResult(raw_identity_number)


@pytest.fixture
def client():
    encoder = Base64Encoder()
    pipeline = AgeVerificationPipeline(
        registry=StaticRegistry({encoder.encode(KNOWN_VALID): date(1999, 1, 1)}),
        encoder=encoder,
        clock=lambda: REFERENCE_DAY,
    )
    return TestClient(create_app(pipeline), raise_server_exceptions=False)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_verify_valid_number(client):
    response = client.post(VERIFY_URL, json={"aadhaar": KNOWN_VALID})

    assert response.status_code == 200
    assert response.json() == {"success": True, "isAdult": True, "message": MSG_COMPLETED}
    assert KNOWN_VALID not in response.text


def test_verify_invalid_number(client):
    response = client.post(VERIFY_URL, json={"aadhaar": "234123412347"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": MSG_INVALID_FORMAT}


@pytest.mark.parametrize("body", [{}, {"aadhaar": ""}, {"aadhaar": None}, {"aadhaar": 234123412346}])
def test_verify_requires_aadhaar(client, body):
    response = client.post(VERIFY_URL, json=body)

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": MSG_AADHAAR_REQUIRED}


@pytest.mark.parametrize("content", [b"{not json", b"[1, 2]", b"\xff\xfe"])
def test_verify_rejects_malformed_body(client, content):
    response = client.post(
        VERIFY_URL, content=content, headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": MSG_INVALID_BODY}


def test_unhandled_fault_is_generic():
    client = TestClient(create_app(ExplodingPipeline()), raise_server_exceptions=False)

    response = client.post(VERIFY_URL, json={"aadhaar": KNOWN_VALID})

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": MSG_INTERNAL_ERROR}
    assert KNOWN_VALID not in response.text


def test_graphql_status(client):
    response = client.post(GRAPHQL_URL, json={"query": "{ status }"})

    assert response.status_code == 200
    assert response.json()["data"] == {"status": MSG_GRAPHQL_STATUS}


def test_graphql_verify_age(client):
    response = client.post(
        GRAPHQL_URL, json={"query": VERIFY_MUTATION, "variables": {"aadhaar": KNOWN_VALID}}
    )

    assert response.status_code == 200
    assert response.json()["data"]["verifyAge"] == {
        "success": True,
        "isAdult": True,
        "message": MSG_COMPLETED,
    }


def test_graphql_verify_age_rejects_bad_format(client):
    response = client.post(
        GRAPHQL_URL, json={"query": VERIFY_MUTATION, "variables": {"aadhaar": "12ab"}}
    )

    assert response.json()["data"]["verifyAge"] == {
        "success": False,
        "isAdult": None,
        "message": MSG_INVALID_FORMAT,
    }


def test_graphql_pipeline_fault_is_generic(caplog):
    client = TestClient(create_app(ExplodingPipeline()), raise_server_exceptions=False)

    with capture_logs() as logs:
        response = client.post(
            GRAPHQL_URL, json={"query": VERIFY_MUTATION, "variables": {"aadhaar": KNOWN_VALID}}
        )

    assert response.status_code == 200
    assert response.json()["data"]["verifyAge"] == {
        "success": False,
        "isAdult": None,
        "message": MSG_INTERNAL_ERROR,
    }
    assert KNOWN_VALID not in response.text
    assert KNOWN_VALID not in caplog.text
    assert KNOWN_VALID not in repr(logs)
    assert any(e.get("error_type") == "RuntimeError" for e in logs)


def test_graphql_execution_error_is_masked(caplog):
    client = TestClient(create_app(UnreadableResultPipeline()), raise_server_exceptions=False)

    with capture_logs() as logs:
        response = client.post(
            GRAPHQL_URL, json={"query": VERIFY_MUTATION, "variables": {"aadhaar": KNOWN_VALID}}
        )

    body = response.json()
    assert body["data"] is None
    assert body["errors"][0]["message"] == MSG_INTERNAL_ERROR
    assert KNOWN_VALID not in response.text
    assert KNOWN_VALID not in caplog.text
    assert KNOWN_VALID not in repr(logs)
    assert {"event": "GraphQL execution fault", "error_type": "RuntimeError", "log_level": "error"} in logs
