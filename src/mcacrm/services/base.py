"""
CrudService: the uniform create/read/update/soft-delete shape shared by every
CRM entity service.

Every call follows the same flow:
  1. Validate the identifier (ValidationError before any store access)
  2. Query the table, eager-loading the requested relations
  3. Serialize to plain dicts: field projection, populated relations,
     money fields converted from cents to dollars
  4. Return the dict (or the {"docs", "pagination"} envelope for pages)

Soft delete sets `inactive=True`. List and page queries skip inactive rows
unless `include_inactive=True`; point lookups by id return them.
"""
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Type, Union

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, SQLModel, select

from mcacrm.models.base import utcnow
from mcacrm.services.errors import CreationError, NotFoundError, ValidationError
from mcacrm.services.money import cents_to_dollars, dollars_to_cents

logger = logging.getLogger(__name__)

# A relation to expand: "funder" or ("funder", "name email phone")
PopulateSpec = Union[str, Tuple[str, Union[str, Iterable[str], None]]]
SelectSpec = Union[str, Iterable[str], None]

_READ_ONLY_FIELDS = {"id", "created_at", "updated_at"}

# Largest value an SQLite / BIGINT primary key can hold
MAX_ID = 2 ** 63 - 1


def validate_id(value: Any, label: str) -> int:
    """Return `value` as a positive integer id or raise ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {label} ID")
    if isinstance(value, int):
        rid = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        rid = int(value.strip())
    else:
        raise ValidationError(f"Invalid {label} ID")
    if rid < 1 or rid > MAX_ID:
        raise ValidationError(f"Invalid {label} ID")
    return rid


def parse_fields(spec: SelectSpec) -> Optional[Set[str]]:
    """Space-separated string or iterable of field names → set (None = all fields)."""
    if spec is None:
        return None
    if isinstance(spec, str):
        names = spec.split()
    else:
        names = list(spec)
    return set(names) or None


class CrudService:
    """Generic service bound to one SQLModel table. Subclasses set the class attributes."""

    model: Type[SQLModel] = None
    label: str = "record"
    money_fields: Tuple[str, ...] = ()
    search_fields: Tuple[str, ...] = ("name",)
    default_sort: str = "-id"
    # Relations embedded when a call passes populate=None; pass [] for none.
    default_populate: Sequence[PopulateSpec] = ()

    def __init__(self, engine=None):
        """
        Args:
            engine: SQLAlchemy engine. Defaults to the application engine.
        """
        if engine is None:
            from mcacrm.db.engine import get_engine
            engine = get_engine()
        self.engine = engine

    # ─── Public API ──────────────────────────────────────────────────────────

    def create(
        self,
        data: Dict[str, Any],
        populate: Optional[Sequence[PopulateSpec]] = None,
        select_fields: SelectSpec = None,
    ) -> Dict[str, Any]:
        """Insert a record from dollar-denominated `data` and return it serialized."""
        payload = self._to_store(data)
        try:
            row = self.model(**payload)
            with Session(self.engine) as s:
                s.add(row)
                s.commit()
                s.refresh(row)
                new_id = row.id
        except SQLAlchemyError as exc:
            logger.error("Failed to create %s: %s", self.label, exc)
            raise CreationError(f"Failed to create {self.label}") from exc

        logger.debug("Created %s %s", self.label, new_id)
        return self.get_by_id(new_id, populate, select_fields)

    def get_by_id(
        self,
        id: Any,
        populate: Optional[Sequence[PopulateSpec]] = None,
        select_fields: SelectSpec = None,
    ) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: malformed id.
            NotFoundError: no record with this id.
        """
        rid = validate_id(id, self.label)
        relations = self._parse_populate(populate)
        fields = self._check_fields(parse_fields(select_fields))

        with Session(self.engine) as s:
            row = s.get(self.model, rid)
            if row is None:
                raise NotFoundError(f"{self._title} not found")
            return self._serialize(row, relations, fields)

    def get_page(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        populate: Optional[Sequence[PopulateSpec]] = None,
        select_fields: SelectSpec = None,
        include_inactive: bool = False,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        One page of matching records.

        Returns:
            {"docs": [...], "pagination": {"page", "limit", "totalPages", "totalResults"}}
        """
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")

        clauses = self._where(filters, include_inactive, search)
        relations = self._parse_populate(populate)
        fields = self._check_fields(parse_fields(select_fields))

        with Session(self.engine) as s:
            total = s.exec(
                select(func.count()).select_from(self.model).where(*clauses)
            ).one()
            rows = s.exec(
                self._select(clauses, sort, relations)
                .offset((page - 1) * limit)
                .limit(limit)
            ).all()
            docs = [self._serialize(r, relations, fields) for r in rows]

        return {
            "docs": docs,
            "pagination": {
                "page": page,
                "limit": limit,
                "totalPages": math.ceil(total / limit),
                "totalResults": total,
            },
        }

    def get_list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[str] = None,
        populate: Optional[Sequence[PopulateSpec]] = None,
        select_fields: SelectSpec = None,
        include_inactive: bool = False,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """All matching records, without pagination."""
        clauses = self._where(filters, include_inactive, search)
        relations = self._parse_populate(populate)
        fields = self._check_fields(parse_fields(select_fields))

        with Session(self.engine) as s:
            rows = s.exec(self._select(clauses, sort, relations)).all()
            return [self._serialize(r, relations, fields) for r in rows]

    def update(
        self,
        id: Any,
        data: Dict[str, Any],
        populate: Optional[Sequence[PopulateSpec]] = None,
        select_fields: SelectSpec = None,
    ) -> Dict[str, Any]:
        """Apply a partial update (dollar-denominated) and return the fresh record."""
        rid = validate_id(id, self.label)
        payload = self._to_store(data)

        with Session(self.engine) as s:
            row = s.get(self.model, rid)
            if row is None:
                raise NotFoundError(f"{self._title} not found")
            for key, value in payload.items():
                setattr(row, key, value)
            row.updated_at = utcnow()
            s.add(row)
            try:
                s.commit()
            except SQLAlchemyError as exc:
                logger.error("Failed to update %s %s: %s", self.label, rid, exc)
                raise CreationError(f"Failed to update {self.label}") from exc

        return self.get_by_id(rid, populate, select_fields)

    def soft_delete(self, id: Any) -> Dict[str, Any]:
        """Mark the record inactive. The row is kept."""
        rid = validate_id(id, self.label)

        with Session(self.engine) as s:
            row = s.get(self.model, rid)
            if row is None:
                raise NotFoundError(f"{self._title} not found")
            row.inactive = True
            row.updated_at = utcnow()
            s.add(row)
            s.commit()

        logger.info("Soft-deleted %s %s", self.label, rid)
        return {
            "success": True,
            "message": f"{self._title} deleted successfully",
        }

    # ─── Internal helpers ─────────────────────────────────────────────────────

    @property
    def _title(self) -> str:
        """Label with only its first letter upper-cased ("ISO account", "Fee type")."""
        return self.label[:1].upper() + self.label[1:]

    def _column(self, name: str):
        if name not in self.model.model_fields:
            raise ValidationError(f"Unknown {self.label} field: {name}")
        return getattr(self.model, name)

    def _check_fields(self, fields: Optional[Set[str]]) -> Optional[Set[str]]:
        if fields is None:
            return None
        for name in fields:
            self._column(name)
        return fields | {"id"}

    def _to_store(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Drop read-only keys, reject unknown ones, convert money to cents."""
        payload = {}
        for key, value in data.items():
            if key in _READ_ONLY_FIELDS:
                continue
            self._column(key)
            if key in self.money_fields:
                value = dollars_to_cents(value)
            payload[key] = value
        return payload

    def _where(
        self,
        filters: Optional[Dict[str, Any]],
        include_inactive: bool,
        search: Optional[str],
    ) -> list:
        clauses = []
        for key, value in (filters or {}).items():
            column = self._column(key)
            if isinstance(value, (list, tuple, set)):
                clauses.append(column.in_(list(value)))
            elif value is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == value)

        if not include_inactive:
            clauses.append(self.model.inactive == False)  # noqa: E712

        if search:
            pattern = f"%{search}%"
            clauses.append(
                or_(*[self._column(f).ilike(pattern) for f in self.search_fields])
            )
        return clauses

    def _order_by(self, sort: Optional[str]) -> list:
        """'name,-created_at' → [name ASC, created_at DESC]."""
        order = []
        for item in (sort or self.default_sort).split(","):
            item = item.strip()
            if not item:
                continue
            if item.startswith("-"):
                order.append(self._column(item[1:]).desc())
            else:
                order.append(self._column(item).asc())
        return order

    def _parse_populate(
        self, populate: Optional[Sequence[PopulateSpec]]
    ) -> List[Tuple[str, Optional[Set[str]]]]:
        if populate is None:
            populate = self.default_populate
        relations = []
        for spec in populate:
            if isinstance(spec, str):
                path, fields = spec, None
            else:
                path, fields = spec
            if path not in self.model.__sqlmodel_relationships__:
                raise ValidationError(f"Unknown {self.label} relation: {path}")
            relations.append((path, parse_fields(fields)))
        return relations

    def _select(self, clauses: list, sort: Optional[str], relations):
        stmt = select(self.model).where(*clauses).order_by(*self._order_by(sort))
        if relations:
            stmt = stmt.options(
                *[selectinload(getattr(self.model, path)) for path, _ in relations]
            )
        return stmt

    def _serialize(
        self,
        row: SQLModel,
        relations: List[Tuple[str, Optional[Set[str]]]],
        fields: Optional[Set[str]],
    ) -> Dict[str, Any]:
        data = row.model_dump(include=fields)
        for name in self.money_fields:
            if name in data:
                data[name] = cents_to_dollars(data[name])

        for path, rel_fields in relations:
            related = getattr(row, path)
            if related is None:
                data[path] = None
            else:
                include = rel_fields | {"id"} if rel_fields else None
                data[path] = related.model_dump(include=include)
        return data
