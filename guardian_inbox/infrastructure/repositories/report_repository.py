"""Persistence layer for incident reports."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Callable

from sqlalchemy.orm import Session

from guardian_inbox.domain.entities import GeoPoint, REPORT_STATUS_VALIDATED, ValidatedReport
from guardian_inbox.infrastructure.models import ReportModel
from guardian_inbox.utils import ensure_app_naive_datetime, ensure_app_timezone


class ReportRepository:
    """Provide read and write access to :class:`ValidatedReport` records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_validated(self) -> Sequence[ValidatedReport]:
        query = (
            self.session.query(ReportModel)
            .filter(ReportModel.status == REPORT_STATUS_VALIDATED)
            .filter(ReportModel.validated_at.is_not(None))
            .order_by(ReportModel.validated_at.desc(), ReportModel.id)
        )
        return [self._to_entity(model) for model in query.all()]

    def get(self, report_id: str) -> ValidatedReport | None:
        model = self.session.get(ReportModel, report_id)
        return self._to_entity(model) if model else None

    def save(self, report: ValidatedReport) -> ValidatedReport:
        """Insert ``report`` or overwrite the stored row sharing its id."""

        model = self.session.get(ReportModel, report.id) or ReportModel(id=report.id)
        self._apply_entity_to_model(model, report)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def delete(self, report_id: str) -> bool:
        model = self.session.get(ReportModel, report_id)
        if model is None:
            return False
        self.session.delete(model)
        self.session.commit()
        return True

    @staticmethod
    def _apply_entity_to_model(model: ReportModel, report: ValidatedReport) -> None:
        model.user_id = report.user_id
        model.type = report.type
        model.status = report.status
        model.level = report.level
        model.validation_level = report.validation_level
        model.risk_level = report.risk_level
        model.location_address = report.location_address
        model.validated_at = ensure_app_naive_datetime(report.validated_at)
        if report.location is not None:
            model.latitude = report.location.lat
            model.longitude = report.location.lng
            model.full_address = report.location.full_address
            model.simplified_address = report.location.simplified_address
        else:
            model.latitude = None
            model.longitude = None
            model.full_address = None
            model.simplified_address = None

    @staticmethod
    def _to_entity(model: ReportModel) -> ValidatedReport:
        location = None
        if model.latitude is not None and model.longitude is not None:
            location = GeoPoint(
                lat=model.latitude,
                lng=model.longitude,
                full_address=model.full_address,
                simplified_address=model.simplified_address,
            )
        return ValidatedReport(
            id=model.id,
            status=model.status,
            type=model.type,
            user_id=model.user_id,
            validated_at=ensure_app_timezone(model.validated_at),
            level=model.level,
            validation_level=model.validation_level,
            risk_level=model.risk_level,
            location=location,
            location_address=model.location_address,
        )


class DatabaseReportSource:
    """Report source backed by the ``report`` table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get_validated_reports(self) -> Sequence[ValidatedReport]:
        with self._session_factory() as session:
            return ReportRepository(session).list_validated()


__all__ = ["ReportRepository", "DatabaseReportSource"]
