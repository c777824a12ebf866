"""Parties referenced by the CRM records: funders, lenders, ISOs, syndicators, users."""
from typing import Optional

from sqlmodel import Field, Relationship

from mcacrm.models.base import RecordBase


class Funder(RecordBase, table=True):
    """Tenant: the funding company that owns the lookup tables and fundings."""

    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class Lender(RecordBase, table=True):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class ISO(RecordBase, table=True):
    """Independent sales organisation (broker) that originates deals."""

    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class Syndicator(RecordBase, table=True):
    """Investor participating in fundings."""

    name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_mobile: Optional[str] = None


class User(RecordBase, table=True):
    first_name: str
    last_name: str
    email: str = Field(index=True)
    phone_mobile: Optional[str] = None


class Formula(RecordBase, table=True):
    """Named fee/expense calculation attached to a lookup type."""

    funder_id: int = Field(foreign_key="funder.id", index=True)
    name: str

    funder: Optional[Funder] = Relationship()
