"""
Default-singleton enforcement.

WHAT: Keeps at most one ``is_default = true`` record per group, where the
group is the value of ``group_field`` (``type`` for templates, ``region`` for
tax settings).

WHY: Receipt creation looks up "the default receipt_sent email template";
two defaults would make that lookup ambiguous, zero would silently skip the
email.

HOW: ``set_as_default`` validates the target first, then clears siblings and
sets the target inside the caller's session transaction, so both writes
commit or roll back together. Two concurrent calls on different sessions
can still interleave; the later commit wins and the group converges back to
one default on the next call.
"""

import logging
from typing import Any, Optional

from sqlalchemy import select, update

from receiptdesk.core.exceptions import ResourceNotFoundError
from receiptdesk.dao.base import BaseDAO, ModelType

logger = logging.getLogger(__name__)


class DefaultSingletonDAO(BaseDAO[ModelType]):
    """
    DAO for record types carrying ``is_default`` within a group.

    Subclasses set ``group_field``.
    """

    group_field: str = "type"

    async def set_as_default(self, record_id: int) -> ModelType:
        """
        Make ``record_id`` the only default of its group.

        Idempotent: calling it again leaves exactly the same single default.

        Raises:
            ResourceNotFoundError: If the record does not exist or is inactive.
                No sibling is modified in that case.
        """
        target = await self.get_by_id(record_id)
        if target is None:
            raise ResourceNotFoundError(
                message=f"{self.model.__name__} not found",
                resource_type=self.model.__name__,
                resource_id=record_id,
            )

        group_column = self._column(self.group_field)
        group_value = getattr(target, self.group_field)

        await self.session.execute(
            update(self.model)
            .where(group_column == group_value, self.model.id != record_id)
            .where(self.model.is_default.is_(True))
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )
        target.is_default = True
        await self.session.flush()
        await self.session.refresh(target)

        logger.info(
            f"{self.model.__name__} {record_id} set as default for {self.group_field}={group_value}",
            extra={"record_id": record_id, "group": group_value},
        )
        return target

    async def get_default(self, group_value: Any, active_only: bool = True) -> Optional[ModelType]:
        """
        The default record of a group, or None.

        Strict lookup: there is no fallback to a non-default sibling.
        """
        query = select(self.model).where(
            self._column(self.group_field) == group_value,
            self.model.is_default.is_(True),
        )
        if active_only:
            query = query.where(self.model.is_active.is_(True))
        result = await self.session.execute(query.order_by(self.model.id.desc()).limit(1))
        return result.scalar_one_or_none()

    async def create_with_default(self, **kwargs: Any) -> ModelType:
        """Create a record; when it is flagged default, enforce the singleton."""
        make_default = bool(kwargs.pop("is_default", False))
        instance = await self.create(is_default=False, **kwargs)
        if make_default:
            instance = await self.set_as_default(instance.id)
        return instance

    async def update_with_default(self, record_id: int, patch: dict) -> Optional[ModelType]:
        """
        Apply ``patch``; when it sets ``is_default`` to true, enforce the singleton.

        Applies to group changes as well: a default moved to another group
        clears the previous default of the new group.
        """
        patch = dict(patch)
        make_default = patch.pop("is_default", None)
        instance = await self.update_by_filter({"id": record_id}, patch) if patch else await self.get_by_id(record_id)
        if instance is None:
            return None
        if make_default is True:
            instance = await self.set_as_default(record_id)
        elif make_default is False and instance.is_default:
            instance.is_default = False
            instance = await self.save(instance)
        return instance
