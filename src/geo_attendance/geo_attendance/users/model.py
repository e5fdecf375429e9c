from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Student:
    """Identity record as returned by the identity lookup.

    Note: Any role can come back from the lookup; gates check capabilities.
    """

    user_id: int
    full_name: str
    role: Role
    is_active: bool = True
    email: Optional[str] = None
