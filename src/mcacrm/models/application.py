"""Applications and their status/assignee history."""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, Relationship

from mcacrm.models.base import RecordBase, utcnow
from mcacrm.models.party import Funder, User


class Application(RecordBase, table=True):
    funder_id: int = Field(foreign_key="funder.id", index=True)
    name: str
    status: Optional[str] = None
    assigned_manager_id: Optional[int] = Field(default=None, foreign_key="user.id")
    assigned_user_id: Optional[int] = Field(default=None, foreign_key="user.id")

    funder: Optional[Funder] = Relationship()


class ApplicationHistory(RecordBase, table=True):
    """
    One row per status or assignee change of an application.
    Written by the application workflow; never edited afterwards.
    """

    application_id: int = Field(foreign_key="application.id", index=True)
    status: Optional[str] = None
    assigned_manager_id: Optional[int] = Field(default=None, foreign_key="user.id")
    assigned_user_id: Optional[int] = Field(default=None, foreign_key="user.id")
    assigned_timestamp: datetime = Field(default_factory=utcnow)
    note: Optional[str] = None

    application: Optional[Application] = Relationship()
    assigned_manager: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[ApplicationHistory.assigned_manager_id]"}
    )
    assigned_user: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[ApplicationHistory.assigned_user_id]"}
    )
