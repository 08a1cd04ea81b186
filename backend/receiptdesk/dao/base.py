"""
Base Data Access Object (DAO) class.

WHY: The DAO pattern separates database operations from business logic,
making the codebase more testable and keeping query construction in one place.

Every record type exposes the same repository surface:
get_by_id, find_many, count_matching, create, update_by_filter, soft_delete.
Records with an ``is_active`` column are invisible to reads once soft-deleted.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from receiptdesk.models.base import Base

# Type variable for model class
ModelType = TypeVar("ModelType", bound=Base)


@dataclass
class Page(Generic[ModelType]):
    """One page of a paginated query."""

    items: List[ModelType]
    total: int
    page: int
    page_size: int
    pages: int = field(init=False)

    def __post_init__(self) -> None:
        self.pages = math.ceil(self.total / self.page_size) if self.page_size else 0


class BaseDAO(Generic[ModelType]):
    """
    Base Data Access Object providing repository operations for all models.

    Subclasses set ``search_fields`` (columns matched case-insensitively by
    substring) and may override ``default_sort``.

    Type Parameters:
        ModelType: The SQLAlchemy model class this DAO manages
    """

    search_fields: Sequence[str] = ()
    default_sort: str = "created_at"

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize DAO with model class and database session.

        Args:
            model: The SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------

    @property
    def soft_deletes(self) -> bool:
        return hasattr(self.model, "is_active")

    def _column(self, name: str):
        if not hasattr(self.model, name):
            raise AttributeError(f"{self.model.__name__} has no field '{name}'")
        return getattr(self.model, name)

    def _apply_filters(
        self,
        query: Select,
        filters: Optional[Dict[str, Any]] = None,
        search: Optional[str] = None,
        search_fields: Optional[Sequence[str]] = None,
        include_inactive: bool = False,
    ) -> Select:
        """
        Add exact-match filters, substring search and the active-record clause.

        A filter value that is a list or tuple matches any of its members.
        None values are skipped so callers can pass optional query params
        straight through.
        """
        if self.soft_deletes and not include_inactive:
            query = query.where(self.model.is_active.is_(True))

        for name, value in (filters or {}).items():
            if value is None:
                continue
            column = self._column(name)
            if isinstance(value, (list, tuple, set)):
                query = query.where(column.in_(list(value)))
            else:
                query = query.where(column == value)

        fields = self.search_fields if search_fields is None else search_fields
        if search and fields:
            pattern = f"%{search}%"
            query = query.where(or_(*(self._column(f).ilike(pattern) for f in fields)))

        return query

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_by_id(self, id: int, include_inactive: bool = False) -> Optional[ModelType]:
        """
        Retrieve a single record by primary key.

        Returns:
            The model instance if found and active, None otherwise
        """
        query = self._apply_filters(
            select(self.model).where(self.model.id == id),
            include_inactive=include_inactive,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_field(
        self, field_name: str, value: Any, include_inactive: bool = False
    ) -> Optional[ModelType]:
        """
        Retrieve a single record by a unique field.

        Raises:
            AttributeError: If field_name doesn't exist on the model
        """
        query = self._apply_filters(
            select(self.model).where(self._column(field_name) == value),
            include_inactive=include_inactive,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_one(self, **filters: Any) -> Optional[ModelType]:
        query = self._apply_filters(select(self.model), filters).limit(1)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_many(
        self,
        filters: Optional[Dict[str, Any]] = None,
        search: Optional[str] = None,
        search_fields: Optional[Sequence[str]] = None,
        sort: Optional[str] = None,
        descending: bool = True,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> List[ModelType]:
        """
        Retrieve records matching filters and search, sorted and paginated.

        Args:
            filters: Exact-match field filters
            search: Case-insensitive substring searched across search_fields
            search_fields: Overrides the DAO's default search columns
            sort: Column to order by (defaults to ``default_sort``)
            descending: Sort direction
            page: 1-based page number; None returns every match
            page_size: Records per page

        Returns:
            List of model instances
        """
        query = self._apply_filters(select(self.model), filters, search, search_fields)

        order_column = self._column(sort or self.default_sort)
        query = query.order_by(order_column.desc() if descending else order_column.asc())
        # Stable order for equal timestamps
        query = query.order_by(self.model.id.desc() if descending else self.model.id.asc())

        if page is not None and page_size:
            query = query.offset((max(page, 1) - 1) * page_size).limit(page_size)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_matching(
        self,
        filters: Optional[Dict[str, Any]] = None,
        search: Optional[str] = None,
        search_fields: Optional[Sequence[str]] = None,
    ) -> int:
        """Count records matching filters and search without loading them."""
        query = self._apply_filters(
            select(func.count()).select_from(self.model), filters, search, search_fields
        )
        result = await self.session.execute(query)
        return int(result.scalar_one())

    async def paginate(
        self,
        page: int = 1,
        page_size: int = 10,
        filters: Optional[Dict[str, Any]] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        descending: bool = True,
    ) -> Page[ModelType]:
        """find_many + count_matching packaged as a Page."""
        page = max(page, 1)
        items = await self.find_many(
            filters=filters,
            search=search,
            sort=sort,
            descending=descending,
            page=page,
            page_size=page_size,
        )
        total = await self.count_matching(filters=filters, search=search)
        return Page(items=items, total=total, page=page, page_size=page_size)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new record.

        Raises:
            IntegrityError: If unique constraints are violated
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()  # Flush to get auto-generated fields
        await self.session.refresh(instance)
        return instance

    async def save(self, instance: ModelType) -> ModelType:
        """Flush pending attribute changes on a loaded instance."""
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, id: int, **kwargs: Any) -> Optional[ModelType]:
        """Update an active record by primary key."""
        return await self.update_by_filter({"id": id}, kwargs)

    async def update_by_filter(
        self, filters: Dict[str, Any], patch: Dict[str, Any]
    ) -> Optional[ModelType]:
        """
        Apply ``patch`` to the first active record matching ``filters``.

        Returns:
            The updated record, or None if nothing matched
        """
        instance = await self.find_one(**filters)
        if instance is None:
            return None
        for name, value in patch.items():
            self._column(name)
            setattr(instance, name, value)
        return await self.save(instance)

    async def soft_delete(self, id: int) -> bool:
        """
        Mark a record inactive.

        Returns:
            True if an active record was deactivated. False for unknown or
            already-inactive records, which are left untouched.
        """
        if not self.soft_deletes:
            raise AttributeError(f"{self.model.__name__} does not support soft delete")
        instance = await self.get_by_id(id)
        if instance is None:
            return False
        instance.is_active = False
        await self.session.flush()
        return True

    async def exists(self, **filters: Any) -> bool:
        """True if at least one active record matches filters."""
        return await self.find_one(**filters) is not None
