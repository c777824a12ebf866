"""Shared test fixtures."""
from typing import Generator

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from mcacrm.models.account import ISOAccount, LenderAccount, SyndicatorAccount  # noqa: F401
from mcacrm.models.application import Application, ApplicationHistory  # noqa: F401
from mcacrm.models.funding import Funding, FundingFee  # noqa: F401
from mcacrm.models.lookup import ExpenseType, FeeType, StipulationType  # noqa: F401
from mcacrm.models.party import ISO, Formula, Funder, Lender, Syndicator, User
from mcacrm.models.transaction import SyndicatorTransaction  # noqa: F401


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    return FakeClock()


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine) -> Generator[Session, None, None]:
    """Provides a DB session connected to in-memory SQLite."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="parties")
def parties_fixture(test_session: Session) -> dict:
    """One persisted funder, lender, ISO, syndicator, user and formula, keyed by name."""
    funder = Funder(name="Throttle Funding", email="ops@throttle.test", phone="555-0100")
    lender = Lender(name="First Capital", email="desk@firstcap.test", phone="555-0101")
    iso = ISO(name="Main Street Brokers", email="deals@msb.test", phone="555-0102")
    syndicator = Syndicator(
        name="Acme Partners",
        first_name="Dana",
        last_name="Reyes",
        email="dana@acme.test",
        phone_mobile="555-0103",
    )
    user = User(first_name="Sam", last_name="Lee", email="sam@throttle.test")
    for row in (funder, lender, iso, syndicator, user):
        test_session.add(row)
    test_session.commit()

    formula = Formula(funder_id=funder.id, name="Percent of funded amount")
    test_session.add(formula)
    test_session.commit()

    for row in (funder, lender, iso, syndicator, user, formula):
        test_session.refresh(row)
    return {
        "funder": funder,
        "lender": lender,
        "iso": iso,
        "syndicator": syndicator,
        "user": user,
        "formula": formula,
    }
