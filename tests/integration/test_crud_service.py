"""
Integration tests for the generic CrudService behaviour, exercised through
FeeTypeService against an in-memory SQLite DB.
"""
import pytest
from sqlmodel import Session

from mcacrm.models.lookup import FeeType
from mcacrm.services.errors import CreationError, NotFoundError, ValidationError
from mcacrm.services.lookup_types import FeeTypeService


@pytest.fixture(name="service")
def service_fixture(engine) -> FeeTypeService:
    return FeeTypeService(engine=engine)


@pytest.fixture(name="fee_type")
def fee_type_fixture(service, parties) -> dict:
    return service.create({
        "funder_id": parties["funder"].id,
        "name": "Origination Fee",
        "formula_id": parties["formula"].id,
        "upfront": True,
    })


class TestCreate:
    def test_returns_serialized_record(self, fee_type, parties):
        assert fee_type["id"] is not None
        assert fee_type["name"] == "Origination Fee"
        assert fee_type["funder_id"] == parties["funder"].id
        assert fee_type["upfront"] is True
        assert fee_type["syndication"] is True
        assert fee_type["inactive"] is False

    def test_default_populate_applied(self, service, parties):
        created = service.create({"funder_id": parties["funder"].id, "name": "Wire Fee"})
        assert created["funder"] == {
            "id": parties["funder"].id,
            "name": "Throttle Funding",
            "email": "ops@throttle.test",
            "phone": "555-0100",
        }
        assert created["formula"] is None

    def test_empty_populate_embeds_nothing(self, service, parties):
        created = service.create(
            {"funder_id": parties["funder"].id, "name": "Wire Fee"},
            populate=[],
        )
        assert "funder" not in created
        assert "formula" not in created

    def test_missing_required_column_raises_creation_error(self, service):
        with pytest.raises(CreationError):
            service.create({"name": "No funder"})

    def test_unknown_field_rejected(self, service, parties):
        with pytest.raises(ValidationError):
            service.create({"funder_id": parties["funder"].id, "name": "X", "colour": "red"})

    def test_id_in_payload_is_ignored(self, service, parties):
        created = service.create({"id": 999, "funder_id": parties["funder"].id, "name": "X"})
        assert created["id"] != 999


class TestGetById:
    def test_fetches_record(self, service, fee_type):
        assert service.get_by_id(fee_type["id"])["name"] == "Origination Fee"

    def test_accepts_numeric_string(self, service, fee_type):
        assert service.get_by_id(str(fee_type["id"]))["id"] == fee_type["id"]

    @pytest.mark.parametrize(
        "bad_id",
        ["abc", "", "0", 0, -3, None, True, "12x", 4.5, "\u00b2", "\u0661\u0662", "9" * 25, 2 ** 63],
    )
    def test_malformed_id(self, service, bad_id):
        with pytest.raises(ValidationError, match="Invalid fee type ID"):
            service.get_by_id(bad_id)

    def test_missing_record(self, service):
        with pytest.raises(NotFoundError, match="Fee type not found"):
            service.get_by_id(4242)

    def test_validation_happens_before_store_access(self):
        service = FeeTypeService(engine=object())  # any store access would blow up
        with pytest.raises(ValidationError):
            service.get_by_id("not-an-id")
        with pytest.raises(ValidationError):
            service.get_by_id("9" * 25)

    def test_field_projection(self, service, fee_type):
        doc = service.get_by_id(fee_type["id"], populate=[], select_fields="name upfront")
        assert set(doc) == {"id", "name", "upfront"}

    def test_projection_of_populated_relation(self, service, fee_type):
        doc = service.get_by_id(fee_type["id"], populate=[("formula", ["name"])])
        assert doc["formula"] == {"id": fee_type["formula_id"], "name": "Percent of funded amount"}

    def test_populate_whole_relation(self, service, fee_type):
        doc = service.get_by_id(fee_type["id"], populate=["funder"])
        assert doc["funder"]["name"] == "Throttle Funding"
        assert "inactive" in doc["funder"]

    def test_unknown_relation_rejected(self, service, fee_type):
        with pytest.raises(ValidationError):
            service.get_by_id(fee_type["id"], populate=["merchant"])

    def test_unknown_projection_field_rejected(self, service, fee_type):
        with pytest.raises(ValidationError):
            service.get_by_id(fee_type["id"], select_fields="name price")


class TestGetPage:
    @pytest.fixture(autouse=True)
    def _seed(self, service, parties):
        for i in range(25):
            service.create({
                "funder_id": parties["funder"].id,
                "name": f"Fee {i:02d}",
                "default": i % 5 == 0,
            })

    def test_second_page(self, service, parties):
        result = service.get_page({"funder_id": parties["funder"].id}, "name", page=2, limit=10)

        assert [d["name"] for d in result["docs"]] == [f"Fee {i:02d}" for i in range(10, 20)]
        assert result["pagination"] == {
            "page": 2,
            "limit": 10,
            "totalPages": 3,
            "totalResults": 25,
        }

    def test_last_page_is_partial(self, service):
        result = service.get_page({}, "name", page=3, limit=10)
        assert len(result["docs"]) == 5

    def test_page_past_end_is_empty(self, service):
        result = service.get_page({}, "name", page=9, limit=10)
        assert result["docs"] == []
        assert result["pagination"]["totalResults"] == 25

    def test_empty_result_has_zero_pages(self, service):
        result = service.get_page({"name": "nothing"}, page=1, limit=10)
        assert result["pagination"]["totalPages"] == 0
        assert result["pagination"]["totalResults"] == 0

    def test_descending_sort(self, service):
        result = service.get_page({}, "-name", page=1, limit=3)
        assert [d["name"] for d in result["docs"]] == ["Fee 24", "Fee 23", "Fee 22"]

    def test_boolean_filter(self, service):
        result = service.get_page({"default": True}, "name", limit=50)
        assert [d["name"] for d in result["docs"]] == ["Fee 00", "Fee 05", "Fee 10", "Fee 15", "Fee 20"]

    def test_list_filter_is_membership(self, service):
        result = service.get_page({"name": ["Fee 01", "Fee 02", "missing"]}, "name")
        assert [d["name"] for d in result["docs"]] == ["Fee 01", "Fee 02"]

    def test_search_is_case_insensitive(self, service):
        result = service.get_page(search="fee 1", sort="name", limit=50)
        assert result["pagination"]["totalResults"] == 10

    def test_invalid_page_arguments(self, service):
        with pytest.raises(ValidationError):
            service.get_page(page=0)
        with pytest.raises(ValidationError):
            service.get_page(limit=0)

    def test_unknown_filter_field(self, service):
        with pytest.raises(ValidationError):
            service.get_page({"colour": "red"})

    def test_unknown_sort_field(self, service):
        with pytest.raises(ValidationError):
            service.get_page(sort="-colour")


class TestGetList:
    def test_returns_all_without_pagination(self, service, parties):
        for name in ("B", "A", "C"):
            service.create({"funder_id": parties["funder"].id, "name": name})
        assert [d["name"] for d in service.get_list(sort="name")] == ["A", "B", "C"]

    def test_projection_applies_to_every_row(self, service, parties):
        service.create({"funder_id": parties["funder"].id, "name": "A"})
        docs = service.get_list(populate=[], select_fields=["name"])
        assert all(set(d) == {"id", "name"} for d in docs)


class TestUpdate:
    def test_partial_update(self, service, fee_type):
        updated = service.update(fee_type["id"], {"name": "Origination (new)"})
        assert updated["name"] == "Origination (new)"
        assert updated["upfront"] is True
        assert updated["updated_at"] >= fee_type["updated_at"]

    def test_missing_record(self, service):
        with pytest.raises(NotFoundError):
            service.update(777, {"name": "x"})

    def test_malformed_id(self, service):
        with pytest.raises(ValidationError):
            service.update("nope", {"name": "x"})

    def test_unknown_field_rejected(self, service, fee_type):
        with pytest.raises(ValidationError):
            service.update(fee_type["id"], {"colour": "red"})


class TestSoftDelete:
    def test_marks_inactive_and_keeps_row(self, service, fee_type, engine):
        result = service.soft_delete(fee_type["id"])

        assert result == {"success": True, "message": "Fee type deleted successfully"}
        with Session(engine) as s:
            row = s.get(FeeType, fee_type["id"])
            assert row is not None
            assert row.inactive is True

    def test_hidden_from_lists_unless_requested(self, service, fee_type):
        service.soft_delete(fee_type["id"])

        assert service.get_list() == []
        assert service.get_page()["pagination"]["totalResults"] == 0
        assert [d["id"] for d in service.get_list(include_inactive=True)] == [fee_type["id"]]

    def test_still_readable_by_id(self, service, fee_type):
        service.soft_delete(fee_type["id"])
        assert service.get_by_id(fee_type["id"])["inactive"] is True

    def test_can_be_reactivated(self, service, fee_type):
        service.soft_delete(fee_type["id"])
        service.update(fee_type["id"], {"inactive": False})
        assert len(service.get_list()) == 1

    def test_missing_record(self, service):
        with pytest.raises(NotFoundError):
            service.soft_delete(31337)
