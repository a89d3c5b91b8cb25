"""
Vendor registry and payout flag.
"""

from decimal import Decimal
from typing import Any, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .database import SubsidyDatabase
from .errors import ConflictError, StoreError, ValidationError
from .schema import vendors

logger = structlog.get_logger()


async def list_vendors(db: SubsidyDatabase) -> list[dict[str, Any]]:
    """Return every vendor, ordered by name."""
    try:
        async with db.engine.connect() as conn:
            result = await conn.execute(select(vendors).order_by(vendors.c.name))
            return [dict(row) for row in result.mappings().all()]
    except SQLAlchemyError as e:
        logger.error("list_vendors_failed", error=str(e))
        raise StoreError("Failed to fetch vendors.") from e


async def add_vendor(
    db: SubsidyDatabase,
    name: Optional[str],
    wallet_address: Optional[str],
    milestone_goal: Optional[int],
    reward_amount: Optional[Decimal],
) -> int:
    """
    Register a vendor and return its id.

    Every field must be truthy, so a zero goal or reward is rejected.
    """
    if not name or not wallet_address or not milestone_goal or not reward_amount:
        raise ValidationError("All vendor fields are required.")

    try:
        async with db.engine.begin() as conn:
            result = await conn.execute(
                vendors.insert().values(
                    name=name,
                    wallet_address=wallet_address,
                    milestone_goal=milestone_goal,
                    reward_amount=reward_amount,
                )
            )
            vendor_id = result.inserted_primary_key[0]
    except IntegrityError as e:
        raise ConflictError("A vendor with this wallet address already exists.") from e
    except SQLAlchemyError as e:
        logger.error("add_vendor_failed", wallet_address=wallet_address, error=str(e))
        raise StoreError("Failed to add vendor.") from e

    logger.info("vendor_added", vendor_id=vendor_id, wallet_address=wallet_address)
    return vendor_id


async def mark_paid(db: SubsidyDatabase, vendor_id: int) -> None:
    """
    Set is_paid for the vendor.

    Unconditional: unknown ids, already-paid vendors and vendors below
    their milestone goal are all accepted without complaint.
    """
    try:
        async with db.engine.begin() as conn:
            await conn.execute(
                vendors.update().where(vendors.c.id == vendor_id).values(is_paid=True)
            )
    except SQLAlchemyError as e:
        logger.error("payout_failed", vendor_id=vendor_id, error=str(e))
        raise StoreError("Failed to process payout.") from e

    logger.info("payout_marked", vendor_id=vendor_id)
