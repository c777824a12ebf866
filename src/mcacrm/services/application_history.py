"""Application history: an append-only trail of status and assignee changes."""
from typing import Any, Dict, List, Optional

from mcacrm.models.application import ApplicationHistory
from mcacrm.models.base import utcnow
from mcacrm.services.base import CrudService, validate_id

DEFAULT_POPULATE = [
    ("assigned_manager", "first_name last_name email"),
    ("assigned_user", "first_name last_name email"),
]


class ApplicationHistoryService(CrudService):
    model = ApplicationHistory
    label = "application history"
    search_fields = ("note",)
    default_sort = "-assigned_timestamp,-id"
    default_populate = DEFAULT_POPULATE

    def record_change(
        self,
        application: Dict[str, Any],
        note: str,
        *,
        status: Optional[str] = None,
        assigned_manager_id: Optional[int] = None,
        assigned_user_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Append a history row for `application` (a serialized Application).
        Values not passed fall back to the application's current ones.
        """
        return self.create({
            "application_id": application["id"],
            "status": status or application.get("status"),
            "assigned_manager_id": assigned_manager_id or application.get("assigned_manager_id"),
            "assigned_user_id": assigned_user_id or application.get("assigned_user_id"),
            "assigned_timestamp": utcnow(),
            "note": note,
        })

    def get_for_application(self, application_id: Any, populate=None) -> List[Dict[str, Any]]:
        """Full trail of one application, newest first."""
        application_id = validate_id(application_id, "application")
        return self.get_list(
            {"application_id": application_id},
            populate=populate,
        )
