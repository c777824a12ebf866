"""Fee, expense and stipulation type lookup services (one table each, per funder)."""
from typing import Any, Dict, List

from mcacrm.models.lookup import ExpenseType, FeeType, StipulationType
from mcacrm.services.base import CrudService, validate_id

DEFAULT_POPULATE = [
    ("funder", "name email phone"),
    ("formula", "name"),
]


class FeeTypeService(CrudService):
    model = FeeType
    label = "fee type"
    default_sort = "name"
    default_populate = DEFAULT_POPULATE

    def get_defaults(self, funder_id: Any) -> List[Dict[str, Any]]:
        """Active fee types a new funding gets automatically."""
        funder_id = validate_id(funder_id, "funder")
        return self.get_list({"funder_id": funder_id, "default": True})


class ExpenseTypeService(CrudService):
    model = ExpenseType
    label = "expense type"
    default_sort = "name"
    default_populate = DEFAULT_POPULATE

    def get_defaults(self, funder_id: Any) -> List[Dict[str, Any]]:
        funder_id = validate_id(funder_id, "funder")
        return self.get_list({"funder_id": funder_id, "default": True})


class StipulationTypeService(CrudService):
    model = StipulationType
    label = "stipulation type"
    default_sort = "name"
    default_populate = DEFAULT_POPULATE[:1]

    def get_required(self, funder_id: Any) -> List[Dict[str, Any]]:
        """Stipulations requested on every new application of this funder."""
        funder_id = validate_id(funder_id, "funder")
        return self.get_list({"funder_id": funder_id, "required": True})
