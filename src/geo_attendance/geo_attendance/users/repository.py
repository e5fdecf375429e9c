from __future__ import annotations

from typing import Optional, Protocol

from .model import Student


class UserRepository(Protocol):
    """Identity lookup port.

    Services depend on this interface, not on a concrete identity store.
    """

    def get_by_id(self, user_id: int) -> Optional[Student]:
        raise NotImplementedError
