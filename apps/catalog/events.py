"""
Catalog Domain Events

Events describing changes to catalog membership.
They are published on the engine's bus after the transaction commits.
"""

from dataclasses import dataclass
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass
class ParentRegistered(DomainEvent):
    """A hotel or train was registered under a new registration number"""
    parent_id: Optional[int] = None
    kind: str = ''
    registration_no: str = ''


@dataclass
class ChildCreated(DomainEvent):
    """An offering was created under a parent (already attached)"""
    child_id: Optional[int] = None
    parent_id: Optional[int] = None
    kind: str = ''


@dataclass
class ChildDeleted(DomainEvent):
    """An offering was deleted (already detached)"""
    child_id: Optional[int] = None
    parent_id: Optional[int] = None


@dataclass
class ChildAttached(DomainEvent):
    """A child id was added to a parent's child list"""
    parent_id: Optional[int] = None
    child_id: Optional[int] = None


@dataclass
class ChildDetached(DomainEvent):
    """A child id was removed from a parent's child list"""
    parent_id: Optional[int] = None
    child_id: Optional[int] = None
