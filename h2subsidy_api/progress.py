"""
Append-only progress ledger.

A vendor's total progress is the sum of its entries; no entries means 0.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from .database import SubsidyDatabase
from .errors import StoreError, ValidationError
from .schema import INT_MAX, progress_logs

logger = structlog.get_logger()

INVALID_PROGRESS = "Invalid progress value."


def parse_progress(value: Any) -> int:
    """
    Parse a progress increment.

    Accepts integers and integral numeric strings or floats. Anything
    missing, non-numeric, fractional, zero, negative or larger than the
    progress column holds is rejected.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(INVALID_PROGRESS)
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(INVALID_PROGRESS) from None
    # Bound before integral checks: "1e1000000" would expand to a million digits
    if not number.is_finite() or number <= 0 or number > INT_MAX:
        raise ValidationError(INVALID_PROGRESS)
    if number != number.to_integral_value():
        raise ValidationError(INVALID_PROGRESS)
    return int(number)


async def get_total_progress(db: SubsidyDatabase, vendor_id: int) -> int:
    stmt = select(func.coalesce(func.sum(progress_logs.c.progress), 0)).where(
        progress_logs.c.vendor_id == vendor_id
    )
    try:
        async with db.engine.connect() as conn:
            total = (await conn.execute(stmt)).scalar_one()
    except SQLAlchemyError as e:
        logger.error("fetch_progress_failed", vendor_id=vendor_id, error=str(e))
        raise StoreError("Failed to fetch progress.") from e
    # MySQL returns SUM as DECIMAL
    return int(total or 0)


async def record_progress(db: SubsidyDatabase, vendor_id: int, new_progress: Any) -> int:
    """
    Append a progress entry stamped with the current time.

    No check against the milestone goal: totals may exceed it.

    Returns:
        The recorded increment.
    """
    progress = parse_progress(new_progress)
    # Stored as naive UTC
    timestamp = datetime.now(timezone.utc).replace(tzinfo=None)

    try:
        async with db.engine.begin() as conn:
            await conn.execute(
                progress_logs.insert().values(
                    vendor_id=vendor_id,
                    progress=progress,
                    timestamp=timestamp,
                )
            )
    except SQLAlchemyError as e:
        logger.error("record_progress_failed", vendor_id=vendor_id, error=str(e))
        raise StoreError("Failed to update progress.") from e

    logger.info("progress_recorded", vendor_id=vendor_id, progress=progress)
    return progress
