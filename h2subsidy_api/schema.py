"""
Table definitions for users, vendors and progress logs.

Compatible with SQLite, MySQL and PostgreSQL.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    false,
    func,
)

ROLES = ("government", "producer", "auditor")

# Largest value a signed 32-bit INT column holds
INT_MAX = 2**31 - 1

# SQLAlchemy metadata
metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", Enum(*ROLES, name="user_role", create_constraint=True), nullable=False),
    Column("created_at", DateTime, server_default=func.now()),
)

vendors = Table(
    "vendors",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("wallet_address", String(42), nullable=False, unique=True),
    Column("milestone_goal", Integer, nullable=False),
    Column("reward_amount", Numeric(10, 2), nullable=False),
    Column("is_paid", Boolean, nullable=False, default=False, server_default=false()),
    Column("created_at", DateTime, server_default=func.now()),
)

progress_logs = Table(
    "progress_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "vendor_id",
        Integer,
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("progress", Integer, nullable=False),
    Column("timestamp", DateTime, nullable=False),
    Index("idx_progress_vendor", "vendor_id"),
)

# Child tables first: safe order for clearing without suspending FK checks
RESET_ORDER = (progress_logs, vendors, users)
