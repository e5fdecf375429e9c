from __future__ import annotations

from typing import Optional, Protocol

from .model import ClassInfo


class ClassRepository(Protocol):
    """Class lookup consumed by the attendance core."""

    def get_by_id(self, class_id: int) -> Optional[ClassInfo]:
        raise NotImplementedError
