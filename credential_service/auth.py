from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool
import logging

from .result import ErrorKind, Result

logger = logging.getLogger(__name__)

# Fixed work factor; every stored hash embeds its own random salt
PASSWORD_HASH_ROUNDS = 29000

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=PASSWORD_HASH_ROUNDS,
)


def hash_password(password: str) -> Result[str]:
    try:
        return Result.success(pwd_context.hash(password))
    except (ValueError, TypeError) as e:
        logger.error("Password hashing error: %s", e)
        return Result.failure(ErrorKind.HASHING_ERROR, str(e))


def verify_password(plain_password: str, hashed_password: str) -> Result[bool]:
    """
    Check a password against a stored hash.

    A mismatch is a successful Result carrying False. Only a failure of the
    verification itself (unrecognised or corrupt hash) is a COMPARISON_ERROR.
    """
    try:
        return Result.success(pwd_context.verify(plain_password, hashed_password))
    except (ValueError, TypeError) as e:
        logger.error("Password comparison error: %s", e)
        return Result.failure(ErrorKind.COMPARISON_ERROR, str(e))


async def hash_password_async(password: str) -> Result[str]:
    # Hashing is CPU-bound; run it off the event loop so other requests proceed
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(plain_password: str, hashed_password: str) -> Result[bool]:
    return await run_in_threadpool(verify_password, plain_password, hashed_password)
