"""
Pydantic models for API requests and responses.

Request fields are optional at the model level so that a missing field is
reported with the operation's own message rather than a generic one.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .schema import INT_MAX


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str = Field(..., description="Human readable outcome")


# ============================================================================
# Accounts
# ============================================================================

class SignupRequest(BaseModel):
    """Request to create an account."""

    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Login email (unique)")
    role: Optional[str] = Field(None, description="government, producer or auditor")
    password: Optional[str] = Field(None, description="Plain-text password")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Ada Producer",
                    "email": "ada@example.com",
                    "role": "producer",
                    "password": "correct horse battery staple",
                }
            ]
        }
    }


class LoginRequest(BaseModel):
    """Request to log in through a role portal."""

    email: Optional[str] = Field(None, description="Login email")
    password: Optional[str] = Field(None, description="Plain-text password")
    role: Optional[str] = Field(None, description="Portal the user is logging in through")


class UserInfo(BaseModel):
    id: int
    name: str
    email: str
    role: str


class LoginResponse(BaseModel):
    """Successful login; the password hash is never included."""

    message: str = Field(..., description="Human readable outcome")
    user: UserInfo


# ============================================================================
# Vendors
# ============================================================================

class AddVendorRequest(BaseModel):
    """Request to register a vendor."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "name": "Acme H2",
                    "walletAddress": "0x1234567890abcdef1234567890abcdef12345678",
                    "milestoneGoal": 1000,
                    "rewardAmount": "50000.00",
                }
            ]
        },
    )

    name: Optional[str] = Field(None, description="Vendor name")
    wallet_address: Optional[str] = Field(
        None, alias="walletAddress", max_length=42, description="Wallet address (unique)"
    )
    milestone_goal: Optional[int] = Field(
        None, alias="milestoneGoal", ge=-INT_MAX - 1, le=INT_MAX, description="Cumulative progress target"
    )
    reward_amount: Optional[Decimal] = Field(
        None, alias="rewardAmount", max_digits=10, decimal_places=2, description="Subsidy amount"
    )


class AddVendorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    vendor_id: int = Field(..., alias="vendorId")


class VendorResponse(BaseModel):
    """A vendor row as stored."""

    id: int
    name: str
    wallet_address: str
    milestone_goal: int
    reward_amount: Decimal
    is_paid: bool
    created_at: Optional[datetime] = None


# ============================================================================
# Progress
# ============================================================================

class RecordProgressRequest(BaseModel):
    """Request to append a progress increment."""

    model_config = ConfigDict(populate_by_name=True)

    # Parsed by the ledger so every bad value gets the same 400 message
    new_progress: Any = Field(None, alias="newProgress", description="Positive integer increment")


class ProgressResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_progress: int = Field(..., alias="totalProgress")


# ============================================================================
# Health
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    database: bool = Field(..., description="Database connectivity")
