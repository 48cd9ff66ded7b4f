"""
Unit of Work Pattern

Manages database transactions and ensures that domain events
are published only after successful transaction commit.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from django.db import DatabaseError, IntegrityError, transaction

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent
from shared.domain.exceptions import StorageFailure

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""
        pass

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""
        pass

    @abstractmethod
    def collect_events(self, aggregate):
        """Collect events from aggregate root"""
        pass


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Wraps one transaction.atomic() block on the given database alias and
    publishes collected domain events on the owning engine's bus after commit.
    Database errors other than integrity violations leave the block as
    StorageFailure; the transaction is rolled back either way.

    Usage:
        with DjangoUnitOfWork(bus) as uow:
            calendar = calendar_repo.get_by_unit_id(unit_id, lock=True)
            calendar.block(dates)
            uow.collect_events(calendar)
            calendar_repo.save(calendar)
            # Transaction commits here
        # Events are published after commit
    """

    def __init__(self, bus: MessageBus, using: str = 'default'):
        self.bus = bus
        self.using = using
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic(using=self.using)
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                try:
                    self._transaction.__exit__(exc_type, exc_val, exc_tb)
                except IntegrityError:
                    raise
                except DatabaseError as e:
                    logger.error(f"Transaction on '{self.using}' failed to complete: {e}")
                    raise StorageFailure(str(e)) from e
                finally:
                    self._transaction = None

        if exc_type is not None and issubclass(exc_type, DatabaseError) \
                and not issubclass(exc_type, IntegrityError):
            raise StorageFailure(str(exc_val)) from exc_val
        return False

    def commit(self):
        """
        Commit changes and publish events

        Events are published using Django's transaction.on_commit()
        to ensure they're only sent after database commit succeeds.
        """
        logger.debug(f"Committing transaction with {len(self._events)} events")

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events), using=self.using)

    def rollback(self):
        """Rollback changes and discard events"""
        logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def collect_events(self, aggregate):
        """
        Collect events from aggregate root

        Extracts all domain events from the aggregate and
        clears them from the aggregate.
        """
        if hasattr(aggregate, 'events'):
            new_events = aggregate.events
            if new_events:
                self._events.extend(new_events)
                aggregate.clear_events()
                logger.debug(
                    f"Collected {len(new_events)} events from "
                    f"{aggregate.__class__.__name__} (ID: {aggregate.id})"
                )

    def record(self, event: DomainEvent):
        """Queue an event that is not owned by an aggregate"""
        self._events.append(event)

    def _publish_events(self, events: List[DomainEvent]):
        """
        Publish collected events to the message bus

        Called after successful transaction commit.
        """
        logger.info(f"Publishing {len(events)} domain events after commit")

        try:
            self.bus.publish_events(events)
        except Exception as e:
            logger.error(f"Error publishing events: {e}", exc_info=True)
            # State is already committed; publishing failures are only logged
