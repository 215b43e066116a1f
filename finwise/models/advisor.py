"""
Advisor Models

Chat messages exchanged on the advisor page, and the banking data
the advice generator reads to build its financial context.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finwise.models.finance import utc_now


class ChatSender(str, Enum):
    """Who produced a chat message."""
    USER = "user"
    BOT = "bot"


class ChatMessage(BaseModel):
    """
    One message in the advisor conversation.

    Ids are sequential within a session and reflect insertion order.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1)
    text: str
    sender: ChatSender


class AccountBalance(BaseModel):
    """Current balance of the user's primary account."""

    amount: Decimal
    currency: str = Field(default="USD", min_length=3, max_length=3)


class BankTransaction(BaseModel):
    """
    A recent transaction on the user's account.

    Amounts are absolute values; the sign convention of the
    banking API is normalized away when the record is built.
    """

    id: str
    amount: Decimal
    currency: str = Field(default="USD")
    description: str = Field(default="")
    date: datetime = Field(default_factory=utc_now)
    category: str = Field(default="Uncategorized")

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v):
        """Missing or blank categories read as 'Uncategorized'."""
        if v is None or not str(v).strip():
            return "Uncategorized"
        return v
