"""Money movements between a funder and a syndicator."""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, Relationship

from mcacrm.models.base import RecordBase
from mcacrm.models.party import Funder, Syndicator, User

TRANSACTION_TYPES = ("deposit", "withdrawal", "adjustment")
TRANSACTION_STATUSES = ("pending", "submitted", "processing", "succeed", "failed", "cancelled")


class SyndicatorTransaction(RecordBase, table=True):
    syndicator_id: int = Field(foreign_key="syndicator.id", index=True)
    funder_id: int = Field(foreign_key="funder.id", index=True)
    type: str = Field(index=True)  # one of TRANSACTION_TYPES
    status: str = Field(index=True)  # one of TRANSACTION_STATUSES
    amount: int  # cents
    hit_date: Optional[datetime] = None
    response_date: Optional[datetime] = None
    reconciled: bool = False

    created_by_user_id: Optional[int] = Field(default=None, foreign_key="user.id")
    updated_by_user_id: Optional[int] = Field(default=None, foreign_key="user.id")

    syndicator: Optional[Syndicator] = Relationship()
    funder: Optional[Funder] = Relationship()
    created_by_user: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[SyndicatorTransaction.created_by_user_id]"}
    )
    updated_by_user: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[SyndicatorTransaction.updated_by_user_id]"}
    )
