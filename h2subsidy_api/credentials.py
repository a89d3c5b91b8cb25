"""
Signup and role-gated login.

Passwords are stored as salted bcrypt hashes. Hashing and verification run
in the threadpool so they never stall the event loop.
"""

from typing import Any, Optional

import structlog
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .database import SubsidyDatabase
from .errors import AuthError, AuthorizationError, ConflictError, StoreError, ValidationError
from .schema import ROLES, users
from .security import hash_password, verify_password

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid email or password."


async def signup(
    db: SubsidyDatabase,
    name: Optional[str],
    email: Optional[str],
    role: Optional[str],
    password: Optional[str],
    rounds: int = 10,
) -> None:
    """
    Create a user account.

    Raises:
        ValidationError: a field is missing, the role is unknown, or the
            password is longer than bcrypt accepts
        ConflictError: the email is already registered
        StoreError: any other store failure
    """
    if not name or not email or not role or not password:
        raise ValidationError("All fields are required for signup.")
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")

    try:
        password_hash = await run_in_threadpool(hash_password, password, rounds)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    try:
        async with db.engine.begin() as conn:
            await conn.execute(
                users.insert().values(
                    name=name,
                    email=email,
                    password_hash=password_hash,
                    role=role,
                )
            )
    except IntegrityError as e:
        # Unique email is the only constraint a validated row can violate
        raise ConflictError("An account with this email already exists.") from e
    except SQLAlchemyError as e:
        logger.error("signup_failed", email=email, error=str(e))
        raise StoreError("Failed to create user.") from e

    logger.info("user_created", email=email, role=role)


async def login(
    db: SubsidyDatabase,
    email: Optional[str],
    password: Optional[str],
    role: Optional[str],
) -> dict[str, Any]:
    """
    Check credentials and portal role.

    Unknown email and wrong password fail with the same AuthError so the
    response does not reveal which one was wrong. A role mismatch is only
    reported once the password has been verified.

    Returns:
        The user's id, name, email and role (never the hash).
    """
    if not email or not password or not role:
        raise ValidationError("Email, password, and role are required.")

    try:
        async with db.engine.connect() as conn:
            result = await conn.execute(select(users).where(users.c.email == email))
            user = result.mappings().first()
    except SQLAlchemyError as e:
        logger.error("login_failed", email=email, error=str(e))
        raise StoreError("An internal server error occurred.") from e

    if user is None:
        raise AuthError(INVALID_CREDENTIALS)

    if not await run_in_threadpool(verify_password, password, user["password_hash"]):
        raise AuthError(INVALID_CREDENTIALS)

    if user["role"] != role:
        raise AuthorizationError(
            f"Access denied. Please log in through the '{user['role']}' portal."
        )

    logger.info("user_logged_in", user_id=user["id"], role=user["role"])
    return {
        "id": user["id"],
        "name": user["name"],
        "email": user["email"],
        "role": user["role"],
    }
