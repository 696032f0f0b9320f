"""
Unit tests for the authentication event logger.
"""
import logging
from unittest.mock import Mock

import pytest

from credential_service.utils.event_logger import client_ip, log_auth_event


@pytest.fixture
def mock_request():
    """Create a mock FastAPI Request object."""
    request = Mock()
    request.client = Mock()
    request.client.host = "192.168.1.1"
    request.headers = {"user-agent": "Mozilla/5.0 Test Browser"}
    return request


def test_log_auth_event_writes_username_and_ip(caplog, mock_request):
    caplog.set_level(logging.INFO, logger="credential_service")
    log_auth_event("login_success", "alice", mock_request)

    assert len(caplog.records) == 1
    record = caplog.records[0]
    assert record.levelno == logging.INFO
    assert "AUTH login_success" in record.getMessage()
    assert "username=alice" in record.getMessage()
    assert "ip=192.168.1.1" in record.getMessage()


def test_log_auth_event_failure_is_warning(caplog):
    caplog.set_level(logging.INFO, logger="credential_service")
    log_auth_event("register_failure", "bob", reason="duplicate_username")

    record = caplog.records[0]
    assert record.levelno == logging.WARNING
    assert "reason=duplicate_username" in record.getMessage()
    assert "ip=None" in record.getMessage()


def test_log_auth_event_rejects_unknown_type():
    with pytest.raises(ValueError, match="Invalid event_type"):
        log_auth_event("password_reset", "alice")


def test_client_ip_falls_back_to_forwarded_for():
    request = Mock()
    request.client = None
    request.headers = {"x-forwarded-for": "10.0.0.5, 172.16.0.1"}
    assert client_ip(request) == "10.0.0.5"


def test_passwords_never_logged(client, caplog):
    caplog.set_level(logging.DEBUG, logger="credential_service")
    client.post("/register", json={"username": "quinn", "password": "hunter2-secret"})
    client.post("/login", json={"username": "quinn", "password": "hunter2-secret"})
    client.post("/login", json={"username": "quinn", "password": "wrong-secret"})

    assert "quinn" in caplog.text
    assert "hunter2-secret" not in caplog.text
    assert "wrong-secret" not in caplog.text
    assert "pbkdf2" not in caplog.text
