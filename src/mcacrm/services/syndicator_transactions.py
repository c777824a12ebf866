"""Syndicator transaction service."""
import logging
from typing import Any, Dict

from mcacrm.models.transaction import (
    TRANSACTION_STATUSES,
    TRANSACTION_TYPES,
    SyndicatorTransaction,
)
from mcacrm.services.base import CrudService
from mcacrm.services.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_POPULATE = [
    ("syndicator", "name first_name last_name email phone_mobile"),
    ("funder", "name email phone"),
    ("created_by_user", "first_name last_name email phone_mobile"),
    ("updated_by_user", "first_name last_name email phone_mobile"),
]


def _check_choices(data: Dict[str, Any]) -> None:
    if "type" in data and data["type"] not in TRANSACTION_TYPES:
        raise ValidationError(f"Invalid transaction type: {data['type']}")
    if "status" in data and data["status"] not in TRANSACTION_STATUSES:
        raise ValidationError(f"Invalid transaction status: {data['status']}")


class SyndicatorTransactionService(CrudService):
    model = SyndicatorTransaction
    label = "syndicator transaction"
    money_fields = ("amount",)
    search_fields = ("type", "status")
    default_sort = "-created_at,-id"
    default_populate = DEFAULT_POPULATE

    def create(self, data, populate=None, select_fields=None):
        _check_choices(data)
        return super().create(data, populate, select_fields)

    def update(self, id, data, populate=None, select_fields=None):
        _check_choices(data)
        return super().update(id, data, populate, select_fields)

    def reconcile(self, id: Any) -> Dict[str, Any]:
        """Mark a transaction as matched against the bank statement."""
        transaction = self.update(id, {"reconciled": True})
        logger.info("Reconciled syndicator transaction %s", transaction["id"])
        return transaction
