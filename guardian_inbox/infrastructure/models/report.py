"""SQLAlchemy model for incident reports."""

from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from guardian_inbox.infrastructure.database import Base


class ReportModel(Base):
    """Database representation of an incident report and its review outcome."""

    __tablename__ = "report"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(128), nullable=True, index=True)
    type = Column(String(80), nullable=False)
    status = Column(String(20), nullable=False, index=True)
    level = Column(Integer, nullable=True)
    validation_level = Column(Integer, nullable=True)
    risk_level = Column(Integer, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    full_address = Column(Text, nullable=True)
    simplified_address = Column(String(255), nullable=True)
    location_address = Column(Text, nullable=True)
    validated_at = Column(DateTime(), nullable=True)


__all__ = ["ReportModel"]
