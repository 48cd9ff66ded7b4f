"""
Referential Integrity Coordinator

Keeps ``Resource.child_ids`` and ``Offering.parent`` mutually consistent.

Invoked by ResourceCatalog inside the unit of work that creates or
deletes the child, so both writes commit or roll back together.
attach/detach are idempotent so a retried or partially completed
operation converges instead of failing.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from apps.catalog.events import ChildAttached, ChildDetached
from apps.catalog.models import Offering, Resource
from shared.application.locks import KeyedLock, parent_key
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ReferentialIntegrityCoordinator:
    """Serialized per parent: every method holds the parent's key lock and row lock."""

    def __init__(
        self,
        uow_factory: Callable[[], DjangoUnitOfWork],
        locks: KeyedLock,
        using: str = "default",
    ):
        self.uow_factory = uow_factory
        self.locks = locks
        self.using = using

    def _locked_parent(self, parent_id) -> Resource | None:
        return (
            Resource.objects.using(self.using)
            .select_for_update()
            .filter(pk=parent_id)
            .first()
        )

    def attach(self, parent_id: int, child_id: int) -> bool:
        """
        Add child_id to the parent's child list

        Returns False when the child was already attached.

        Raises:
            NotFoundError: If the parent does not exist
        """
        with self.locks.hold(parent_key(parent_id)):
            with self.uow_factory() as uow:
                parent = self._locked_parent(parent_id)
                if parent is None:
                    raise NotFoundError("Resource", parent_id)

                if child_id in parent.child_ids:
                    logger.debug(f"Offering {child_id} already attached to resource {parent_id}")
                    return False

                parent.child_ids = [*parent.child_ids, child_id]
                parent.save(using=self.using, update_fields=["child_ids", "updated_at"])
                uow.record(ChildAttached(aggregate_id=parent_id, parent_id=parent_id, child_id=child_id))

        logger.debug(f"Attached offering {child_id} to resource {parent_id}")
        return True

    def detach(self, parent_id: int, child_id: int) -> bool:
        """
        Remove child_id from the parent's child list

        A missing parent or an already removed reference is tolerated.
        Returns True only if a reference was removed.
        """
        with self.locks.hold(parent_key(parent_id)):
            with self.uow_factory() as uow:
                parent = self._locked_parent(parent_id)
                if parent is None:
                    logger.warning(
                        f"Resource {parent_id} not found while detaching offering {child_id}; skipping"
                    )
                    return False

                if child_id not in parent.child_ids:
                    return False

                parent.child_ids = [cid for cid in parent.child_ids if cid != child_id]
                parent.save(using=self.using, update_fields=["child_ids", "updated_at"])
                uow.record(ChildDetached(aggregate_id=parent_id, parent_id=parent_id, child_id=child_id))

        logger.debug(f"Detached offering {child_id} from resource {parent_id}")
        return True

    def reconcile(self, parent_id: int) -> List[int]:
        """
        Rebuild the parent's child list from the offerings that point at it

        Recovery path for rows written outside the engine. Returns the
        resulting child ids.
        """
        with self.locks.hold(parent_key(parent_id)):
            with self.uow_factory():
                parent = self._locked_parent(parent_id)
                if parent is None:
                    raise NotFoundError("Resource", parent_id)

                actual = list(
                    Offering.objects.using(self.using)
                    .filter(parent_id=parent_id)
                    .order_by("id")
                    .values_list("id", flat=True)
                )
                if actual != parent.child_ids:
                    logger.warning(
                        f"Resource {parent_id} child list out of sync: "
                        f"stored={parent.child_ids} actual={actual}"
                    )
                    parent.child_ids = actual
                    parent.save(using=self.using, update_fields=["child_ids", "updated_at"])
        return actual
