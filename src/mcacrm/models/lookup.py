"""Per-funder lookup tables: fee, expense and stipulation types."""
from typing import Optional

from sqlmodel import Field, Relationship

from mcacrm.models.base import RecordBase
from mcacrm.models.party import Formula, Funder


class FeeType(RecordBase, table=True):
    funder_id: int = Field(foreign_key="funder.id", index=True)
    name: str
    formula_id: Optional[int] = Field(default=None, foreign_key="formula.id")
    upfront: bool = False
    syndication: bool = True
    default: bool = False

    funder: Optional[Funder] = Relationship()
    formula: Optional[Formula] = Relationship()


class ExpenseType(RecordBase, table=True):
    funder_id: int = Field(foreign_key="funder.id", index=True)
    name: str
    formula_id: Optional[int] = Field(default=None, foreign_key="formula.id")
    commission: bool = False
    syndication: bool = False
    default: bool = False

    funder: Optional[Funder] = Relationship()
    formula: Optional[Formula] = Relationship()


class StipulationType(RecordBase, table=True):
    """Document a funder may require before funding (bank statements, ID, ...)."""

    funder_id: int = Field(foreign_key="funder.id", index=True)
    name: str = Field(index=True)
    required: bool = Field(default=False, index=True)

    funder: Optional[Funder] = Relationship()
