"""Funding fee service."""
from typing import Any

from sqlalchemy import func
from sqlmodel import Session, select

from mcacrm.models.funding import Funding, FundingFee
from mcacrm.models.lookup import FeeType
from mcacrm.services.base import CrudService, validate_id
from mcacrm.services.errors import NotFoundError
from mcacrm.services.money import cents_to_dollars

DEFAULT_POPULATE = [
    ("funding", "name"),
    ("funder", "name email phone"),
    ("lender", "name email phone"),
    ("iso", "name email phone"),
    ("fee_type", "name"),
    ("created_by_user", "first_name last_name email phone_mobile"),
    ("updated_by_user", "first_name last_name email phone_mobile"),
]


class FundingFeeService(CrudService):
    model = FundingFee
    label = "funding fee"
    money_fields = ("amount",)
    search_fields = ("name", "note")
    default_sort = "-fee_date,-id"
    default_populate = DEFAULT_POPULATE

    def create(self, data, populate=None, select_fields=None):
        """
        Create a fee on an existing funding. funder/lender/iso are copied
        from the funding; a given fee_type_id must exist.
        """
        funding_id = validate_id(data.get("funding_id"), "funding")
        data = dict(data)

        with Session(self.engine) as s:
            funding = s.get(Funding, funding_id)
            if funding is None:
                raise NotFoundError("Funding not found")
            data["funding_id"] = funding.id
            data["funder_id"] = funding.funder_id
            data["lender_id"] = funding.lender_id
            data["iso_id"] = funding.iso_id

            if data.get("fee_type_id") is not None:
                fee_type_id = validate_id(data["fee_type_id"], "fee type")
                if s.get(FeeType, fee_type_id) is None:
                    raise NotFoundError("Fee type not found")
                data["fee_type_id"] = fee_type_id

        return super().create(data, populate, select_fields)

    def total_for_funding(self, funding_id: Any) -> float:
        """Sum of active fee amounts on one funding, in dollars."""
        funding_id = validate_id(funding_id, "funding")
        with Session(self.engine) as s:
            total = s.exec(
                select(func.coalesce(func.sum(FundingFee.amount), 0)).where(
                    FundingFee.funding_id == funding_id,
                    FundingFee.inactive == False,  # noqa: E712
                )
            ).one()
        return cents_to_dollars(total)
