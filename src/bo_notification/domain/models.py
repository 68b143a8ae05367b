"""Notification domain models — pure dataclasses."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Recipient:
    id: str
    email: str
    first_name: str | None = None


@dataclass
class Notification:
    id: str
    user_id: str
    related_id: str
    type: str
    title: str
    message: str
    link: str | None = None
    actions: list[dict[str, Any]] = field(default_factory=list)
