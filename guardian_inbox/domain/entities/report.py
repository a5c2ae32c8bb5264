"""Domain entity representing an incident report reviewed by an administrator."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from .notification import GeoPoint

REPORT_STATUS_PENDING = "Pending"
REPORT_STATUS_VALIDATED = "Validated"
REPORT_STATUS_REJECTED = "Rejected"


def _coerce_level(value: object) -> int:
    if isinstance(value, bool):
        return 1
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(number):
        return 1
    return int(number)


@dataclass
class ValidatedReport:
    """Incident report as read from the report store."""

    id: str
    status: str
    type: str
    user_id: str | None
    validated_at: datetime | None = None
    level: int | None = None
    validation_level: int | None = None
    risk_level: int | None = None
    location: GeoPoint | None = None
    location_address: str | None = None

    def is_validated(self) -> bool:
        """Return whether the report passed review and carries a validation time."""

        return self.status == REPORT_STATUS_VALIDATED and self.validated_at is not None

    def admin_level(self) -> int:
        """Return the level assigned during review, defaulting to ``1``.

        The first non-null of ``level``, ``validation_level`` and ``risk_level``
        wins; a value that is not a finite number also yields ``1``.
        """

        for value in (self.level, self.validation_level, self.risk_level):
            if value is not None:
                return _coerce_level(value)
        return 1

    def display_address(self) -> str:
        if self.location_address:
            return self.location_address
        if self.location is not None:
            return (
                self.location.full_address
                or self.location.simplified_address
                or "Unknown Location"
            )
        return "Unknown Location"


__all__ = [
    "REPORT_STATUS_PENDING",
    "REPORT_STATUS_VALIDATED",
    "REPORT_STATUS_REJECTED",
    "ValidatedReport",
]
