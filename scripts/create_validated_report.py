"""Utility script to insert a validated report into the local database."""

from __future__ import annotations

import argparse
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError

from guardian_inbox.config import get_settings
from guardian_inbox.domain.entities import GeoPoint, REPORT_STATUS_VALIDATED, ValidatedReport
from guardian_inbox.infrastructure.database import (
    create_database_engine,
    create_session_factory,
    initialize_database,
)
from guardian_inbox.infrastructure.repositories import ReportRepository
from guardian_inbox.utils import now_in_app_timezone


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for report creation."""

    parser = argparse.ArgumentParser(
        description="Create a validated incident report for local testing.",
    )
    parser.add_argument("--id", default=None, help="Report id (random when omitted)")
    parser.add_argument("--type", default="crime-theft", help="Incident type")
    parser.add_argument("--user-id", default=None, help="Id of the reporting user")
    parser.add_argument("--level", type=int, default=1, choices=range(1, 6), help="Risk level 1-5")
    parser.add_argument("--lat", type=float, default=None, help="Latitude")
    parser.add_argument("--lng", type=float, default=None, help="Longitude")
    parser.add_argument("--address", default=None, help="Human readable address")
    return parser.parse_args()


def main() -> None:
    """Create a validated report using the provided command line arguments."""

    args = parse_args()
    location = None
    if args.lat is not None and args.lng is not None:
        location = GeoPoint(lat=args.lat, lng=args.lng, full_address=args.address)

    engine = create_database_engine(get_settings().database_url)
    initialize_database(engine)
    session = create_session_factory(engine)()
    try:
        report = ReportRepository(session).save(
            ValidatedReport(
                id=args.id or uuid4().hex,
                status=REPORT_STATUS_VALIDATED,
                type=args.type,
                user_id=args.user_id,
                validated_at=now_in_app_timezone(),
                level=args.level,
                location=location,
                location_address=args.address,
            )
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not store the report: {exc}") from exc
    else:
        print(
            "Report created:\n"
            f"  ID: {report.id}\n"
            f"  Type: {report.type}\n"
            f"  Level: {report.level}\n"
            f"  Address: {report.display_address()}"
        )
    finally:
        session.close()
        engine.dispose()


if __name__ == "__main__":
    main()
