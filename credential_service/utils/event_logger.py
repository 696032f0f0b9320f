"""
Logging setup and authentication event logging.
"""
from datetime import datetime, timezone
from fastapi import Request
from typing import Optional
import sys
import logging
import os

from ..config import Settings

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "register_success",
    "register_failure",
    "login_success",
    "login_failure",
}


def configure_logging(settings: Settings) -> None:
    """
    Configure stdout logging, plus a file handler when LOG_DIR is set.

    Args:
        settings: Service settings (LOG_LEVEL, LOG_DIR)
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    # Try to add file handler, but continue without it if directory creation fails
    if settings.LOG_DIR:
        try:
            os.makedirs(settings.LOG_DIR, exist_ok=True)
            handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, "auth_events.log")))
        except OSError as e:
            print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers
    )


def client_ip(request: Optional[Request]) -> Optional[str]:
    """Client address, falling back to the first X-Forwarded-For entry."""
    if request is None:
        return None

    ip_address = None
    if request.client:
        ip_address = request.client.host

    # X-Forwarded-For can contain multiple IPs, take the first one
    forwarded = request.headers.get("x-forwarded-for")
    if not ip_address and forwarded:
        ip_address = forwarded.split(",")[0].strip()

    return ip_address


def log_auth_event(
    event_type: str,
    username: Optional[str],
    request: Optional[Request] = None,
    reason: Optional[str] = None
) -> None:
    """
    Log a registration or login outcome.

    Never receives or writes a password or password hash.

    Args:
        event_type: One of: register_success, register_failure,
                    login_success, login_failure
        username: Trimmed username the request was made for
        request: FastAPI Request object, if the call came over HTTP
        reason: Optional short failure reason (an error kind value)

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    level = logging.INFO if event_type.endswith("_success") else logging.WARNING
    logger.log(
        level,
        "AUTH %s username=%s ip=%s reason=%s timestamp=%s",
        event_type, username, client_ip(request), reason or "-",
        datetime.now(timezone.utc).isoformat()
    )
