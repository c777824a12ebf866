"""Bank accounts held by lenders, ISOs and syndicators."""
from typing import Optional

from sqlmodel import Field, Relationship

from mcacrm.models.base import RecordBase
from mcacrm.models.party import ISO, Lender, Syndicator


class BankAccountBase(RecordBase):
    name: str
    bank_name: Optional[str] = None
    routing_number: str
    account_number: str
    account_type: Optional[str] = None  # "checking", "saving"
    branch: Optional[str] = None
    dda: Optional[str] = None


class LenderAccount(BankAccountBase, table=True):
    lender_id: int = Field(foreign_key="lender.id", index=True)
    available_balance: int = 0  # cents

    lender: Optional[Lender] = Relationship()


class ISOAccount(BankAccountBase, table=True):
    iso_id: int = Field(foreign_key="iso.id", index=True)

    iso: Optional[ISO] = Relationship()


class SyndicatorAccount(BankAccountBase, table=True):
    syndicator_id: int = Field(foreign_key="syndicator.id", index=True)
    available_balance: int = 0  # cents

    syndicator: Optional[Syndicator] = Relationship()
