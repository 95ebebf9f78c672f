"""
Typed partial updates.

Each patch is a frozen dataclass of optional fields. `changes()` maps the
fields that were supplied onto model columns through the patch's fixed
COLUMN_MAP; nothing outside that map can be written.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional


@dataclass(frozen=True)
class Patch:
    COLUMN_MAP = {}

    @classmethod
    def from_cleaned(cls, cleaned: dict) -> "Patch":
        """Build from a validate_payload() result (keys are already column names)."""
        reverse = {column: name for name, column in cls.COLUMN_MAP.items()}
        return cls(**{reverse[k]: v for k, v in cleaned.items() if k in reverse})

    def changes(self) -> dict:
        return {
            self.COLUMN_MAP[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.changes()


def apply_patch(instance, patch: Patch) -> list[str]:
    """Set each changed column on the model instance; returns the columns touched."""
    changed = patch.changes()
    for column, value in changed.items():
        setattr(instance, column, value)
    return sorted(changed)


@dataclass(frozen=True)
class UserPatch(Patch):
    name: Optional[str] = None
    lastname: Optional[str] = None
    phone: Optional[int] = None
    email: Optional[str] = None
    # Already hashed by the service before the patch is applied
    password_hash: Optional[str] = None

    COLUMN_MAP = {
        "name": "name",
        "lastname": "lastname",
        "phone": "phone",
        "email": "email",
        "password_hash": "password_hash",
    }


@dataclass(frozen=True)
class BusinessPatch(Patch):
    name: Optional[str] = None
    description: Optional[str] = None

    COLUMN_MAP = {
        "name": "name",
        "description": "description",
    }


@dataclass(frozen=True)
class ProductPatch(Patch):
    name: Optional[str] = None
    description: Optional[str] = None
    price_cents: Optional[int] = None

    COLUMN_MAP = {
        "name": "name",
        "description": "description",
        "price_cents": "price_cents",
    }
