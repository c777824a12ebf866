"""Fundings and the fees charged against them."""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, Relationship

from mcacrm.models.base import RecordBase, utcnow
from mcacrm.models.lookup import FeeType
from mcacrm.models.party import ISO, Funder, Lender, User


class Funding(RecordBase, table=True):
    funder_id: int = Field(foreign_key="funder.id", index=True)
    lender_id: Optional[int] = Field(default=None, foreign_key="lender.id")
    iso_id: Optional[int] = Field(default=None, foreign_key="iso.id")
    name: str

    funder: Optional[Funder] = Relationship()


class FundingFee(RecordBase, table=True):
    """
    A fee charged on a funding. funder/lender/iso are denormalised from the
    funding at creation time so fees can be filtered without a join.
    """

    funding_id: int = Field(foreign_key="funding.id", index=True)
    funder_id: int = Field(foreign_key="funder.id", index=True)
    lender_id: Optional[int] = Field(default=None, foreign_key="lender.id")
    iso_id: Optional[int] = Field(default=None, foreign_key="iso.id")
    fee_type_id: Optional[int] = Field(default=None, foreign_key="feetype.id")

    name: str
    amount: int  # cents
    fee_date: datetime = Field(default_factory=utcnow)
    upfront: bool = False
    syndication: bool = False
    note: Optional[str] = None

    created_by_user_id: Optional[int] = Field(default=None, foreign_key="user.id")
    updated_by_user_id: Optional[int] = Field(default=None, foreign_key="user.id")

    funding: Optional[Funding] = Relationship()
    funder: Optional[Funder] = Relationship()
    lender: Optional[Lender] = Relationship()
    iso: Optional[ISO] = Relationship()
    fee_type: Optional[FeeType] = Relationship()
    created_by_user: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[FundingFee.created_by_user_id]"}
    )
    updated_by_user: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[FundingFee.updated_by_user_id]"}
    )
