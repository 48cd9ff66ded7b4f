"""
Catalog Commands

Typed requests accepted by the catalog. ``attrs`` carries the descriptive
fields of the record; unknown keys end up in its ``attributes`` JSON.

Commands:
- RegisterParentCommand: register a hotel or train (duplicate-checked)
- UpdateParentCommand: partial update of a parent
- CreateChildCommand: create an offering under a parent and attach it
- UpdateChildCommand: partial update of an offering
- DeleteChildCommand: delete an offering and detach it from its parent
- AddUnitCommand: add a bookable unit to an offering
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RegisterParentCommand:
    attrs: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateParentCommand:
    parent_id: Any
    attrs: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CreateChildCommand:
    parent_id: Any
    attrs: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateChildCommand:
    child_id: Any
    attrs: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteChildCommand:
    child_id: Any
    parent_id: Optional[Any] = None


@dataclass(frozen=True)
class AddUnitCommand:
    child_id: Any
    label: str
    service_date: Optional[Any] = None
