from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cubequality.db.base import Base
from cubequality.models.common import TimestampMixin, UUIDPrimaryKeyMixin


class StoredReport(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "reports"

    unique_ref_no: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    timestamp: Mapped[str | None] = mapped_column(String(40), nullable=True, index=True)
    hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    media = relationship("ReportMedia", back_populates="report", cascade="all, delete-orphan", lazy="selectin")


class ReportMedia(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "report_media"

    report_id: Mapped[str] = mapped_column(ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
    field: Mapped[str] = mapped_column(String(64), nullable=False)
    content_type: Mapped[str] = mapped_column(String(128), nullable=False)
    token: Mapped[str] = mapped_column(Text, nullable=False)

    report = relationship("StoredReport", back_populates="media")
