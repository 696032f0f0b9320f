"""
Auth Service - registration and login over the credential store.

Requests are normalized once, validated fail-fast, and every store or hashing
failure is turned into an AuthOutcome carrying an HTTP status, a success flag
and a user-facing message. Raw database or hashing error text never leaves
this module.
"""
from dataclasses import dataclass
from typing import Optional, Union
import logging

from fastapi import Request, status

from .auth import hash_password_async, verify_password_async
from .result import ErrorKind
from .schemas import LoginInput, LoginRequest, RegisterInput, RegisterRequest
from .store import CredentialStore
from .utils.event_logger import log_auth_event

logger = logging.getLogger(__name__)

USERNAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 100
PHONE_MAX_LENGTH = 20

MSG_REQUIRED = "Username and password are required"
MSG_EMPTY = "Username and password cannot be empty"
MSG_DUPLICATE = "Username already exists"
MSG_HASHING = "Error processing password"
MSG_REGISTRATION_FAILED = "Registration failed. Please try again."
MSG_REGISTERED = "Registration successful"
MSG_INVALID_CREDENTIALS = "Invalid username or password"
MSG_LOGIN_FAILED = "Login failed. Please try again."
MSG_LOGGED_IN = "Login successful"

CLIENT_ERRORS = {ErrorKind.INVALID_INPUT, ErrorKind.DUPLICATE_USERNAME}


@dataclass(frozen=True)
class AuthOutcome:
    status_code: int
    success: bool
    message: str
    error: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, message: str) -> "AuthOutcome":
        return cls(status.HTTP_200_OK, True, message)

    @classmethod
    def invalid_credentials(cls) -> "AuthOutcome":
        # Domain "no", not an error: 200 with success=false
        return cls(status.HTTP_200_OK, False, MSG_INVALID_CREDENTIALS)

    @classmethod
    def failed(cls, error: ErrorKind, message: str) -> "AuthOutcome":
        code = status.HTTP_400_BAD_REQUEST if error in CLIENT_ERRORS else status.HTTP_500_INTERNAL_SERVER_ERROR
        return cls(code, False, message, error)

    def body(self) -> dict:
        return {"success": self.success, "message": self.message}


def _trim(value: Optional[str]) -> Optional[str]:
    # "" counts as absent; anything else is trimmed and may become ""
    if not value:
        return None
    return value.strip()


def _trim_optional(value: Optional[str]) -> Optional[str]:
    value = _trim(value)
    return value or None


def normalize(request: Union[RegisterRequest, LoginRequest]) -> Union[RegisterInput, LoginInput]:
    """
    Produce the canonical form of a request.

    Username is trimmed, optional contact fields are trimmed with blanks
    becoming None. The password is kept verbatim for hashing; an empty string
    is treated as absent.
    """
    if isinstance(request, RegisterRequest):
        return RegisterInput(
            username=_trim(request.username),
            password=request.password or None,
            email=_trim_optional(request.email),
            phone=_trim_optional(request.phone),
        )
    return LoginInput(
        username=_trim(request.username),
        password=request.password or None,
    )


def validate(data: Union[RegisterInput, LoginInput]) -> Optional[str]:
    """Return the first validation failure message, or None if the input is valid."""
    if data.username is None or data.password is None:
        return MSG_REQUIRED
    if not data.username or not data.password.strip():
        return MSG_EMPTY
    if len(data.username) > USERNAME_MAX_LENGTH:
        return f"Username must be at most {USERNAME_MAX_LENGTH} characters"
    if isinstance(data, RegisterInput):
        if data.email and len(data.email) > EMAIL_MAX_LENGTH:
            return f"Email must be at most {EMAIL_MAX_LENGTH} characters"
        if data.phone and len(data.phone) > PHONE_MAX_LENGTH:
            return f"Phone must be at most {PHONE_MAX_LENGTH} characters"
    return None


class AuthService:
    """
    Stateless request handler for register and login.

    Args:
        store: The credential store (owns the connection pool)
    """

    def __init__(self, store: CredentialStore):
        self.store = store

    async def register(self, payload: RegisterRequest, request: Optional[Request] = None) -> AuthOutcome:
        data = normalize(payload)
        invalid = validate(data)
        if invalid:
            return AuthOutcome.failed(ErrorKind.INVALID_INPUT, invalid)

        try:
            outcome = await self._register(data)
        except Exception:
            logger.exception("Registration error for user %s", data.username)
            outcome = AuthOutcome.failed(ErrorKind.REGISTRATION_FAILED, MSG_REGISTRATION_FAILED)

        if outcome.success:
            logger.info("User registered successfully: %s", data.username)
            log_auth_event("register_success", data.username, request)
        else:
            log_auth_event("register_failure", data.username, request, outcome.error.value)
        return outcome

    async def _register(self, data: RegisterInput) -> AuthOutcome:
        acquired = await self.store.acquire()
        if not acquired.ok:
            return AuthOutcome.failed(acquired.error, MSG_REGISTRATION_FAILED)

        connection = acquired.value
        try:
            existing = await connection.find_by_username(data.username)
            if not existing.ok:
                return AuthOutcome.failed(existing.error, MSG_REGISTRATION_FAILED)
            if existing.value is not None:
                return AuthOutcome.failed(ErrorKind.DUPLICATE_USERNAME, MSG_DUPLICATE)

            hashed = await hash_password_async(data.password)
            if not hashed.ok:
                return AuthOutcome.failed(ErrorKind.HASHING_ERROR, MSG_HASHING)

            inserted = await connection.insert(data.username, hashed.value, data.email, data.phone)
            if inserted.error == ErrorKind.DUPLICATE_USERNAME:
                # Lost a race with a concurrent registration past the pre-check
                return AuthOutcome.failed(ErrorKind.DUPLICATE_USERNAME, MSG_DUPLICATE)
            if not inserted.ok:
                return AuthOutcome.failed(inserted.error, MSG_REGISTRATION_FAILED)
            return AuthOutcome.ok(MSG_REGISTERED)
        finally:
            await connection.release()

    async def login(self, payload: LoginRequest, request: Optional[Request] = None) -> AuthOutcome:
        data = normalize(payload)
        invalid = validate(data)
        if invalid:
            return AuthOutcome.failed(ErrorKind.INVALID_INPUT, invalid)

        try:
            outcome = await self._login(data)
        except Exception:
            logger.exception("Login error for user %s", data.username)
            outcome = AuthOutcome.failed(ErrorKind.STORE_UNAVAILABLE, MSG_LOGIN_FAILED)

        if outcome.success:
            logger.info("User logged in successfully: %s", data.username)
            log_auth_event("login_success", data.username, request)
        else:
            reason = outcome.error.value if outcome.error else "invalid_credentials"
            log_auth_event("login_failure", data.username, request, reason)
        return outcome

    async def _login(self, data: LoginInput) -> AuthOutcome:
        # Connection is released before hashing so it is not held during verification
        found = await self.store.find_by_username(data.username)
        if not found.ok:
            return AuthOutcome.failed(found.error, MSG_LOGIN_FAILED)

        account = found.value
        if account is None:
            return AuthOutcome.invalid_credentials()

        if not account.password_hash:
            logger.error("User found but password hash is missing: id=%s", account.id)
            return AuthOutcome.invalid_credentials()

        verified = await verify_password_async(data.password, account.password_hash)
        if not verified.ok:
            return AuthOutcome.failed(ErrorKind.COMPARISON_ERROR, MSG_LOGIN_FAILED)
        if verified.value:
            return AuthOutcome.ok(MSG_LOGGED_IN)
        return AuthOutcome.invalid_credentials()
