from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClassLocation:
    """Classroom position; owned by the class, read-only to attendance."""

    latitude: float
    longitude: float
    label: str = ""

    def to_dict(self) -> dict:
        return {"lat": self.latitude, "lng": self.longitude, "label": self.label}


@dataclass(frozen=True)
class ClassInfo:
    class_id: int
    name: str
    subject: str
    teacher_id: Optional[int]
    location: Optional[ClassLocation]
