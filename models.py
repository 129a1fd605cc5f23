# models.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    create_engine,
    String,
    Integer,
    DateTime,
    select,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    sessionmaker,
)

# -----------------------------
# SQLAlchemy base
# -----------------------------
class Base(DeclarativeBase):
    pass


# -----------------------------
# Tables
# -----------------------------
class ReportRecord(Base):
    """
    One row per generated PDF (quotes and work orders).
    The newest row for a document is its "last generated report" pointer.
    Files are time-suffixed, so older rows keep pointing at valid files.
    """
    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    document_kind: Mapped[str] = mapped_column(String(32), nullable=False, index=True)   # quote | workorder
    document_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # URL-style path, e.g. /pdf/quote_7_1700000000000.pdf
    pdf_path: Mapped[str] = mapped_column(String, nullable=False)
    pages: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    skipped_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    grand_total_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    generated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


# -----------------------------
# Engine / Session factory
# -----------------------------
def make_engine(db_url: str, echo: bool = False):
    """
    Create SQLAlchemy engine.
    Note: SQLite path must exist (instance/ folder). We'll create it in setup steps.
    """
    return create_engine(db_url, echo=echo, future=True)


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


# -----------------------------
# Ledger helpers
# -----------------------------
def record_report(session, kind: str, document_id, report) -> ReportRecord:
    """Store a GeneratedReport as the newest report for (kind, document_id)."""
    row = ReportRecord(
        document_kind=kind,
        document_id=str(document_id),
        pdf_path=report.path,
        pages=report.pages,
        skipped_rows=len(report.skipped_rows),
        grand_total_cents=report.grand_total_cents,
        generated_at=datetime.utcnow(),
    )
    session.add(row)
    session.commit()
    return row


def latest_report(session, kind: str, document_id) -> ReportRecord | None:
    return session.execute(
        select(ReportRecord)
        .where(ReportRecord.document_kind == kind, ReportRecord.document_id == str(document_id))
        .order_by(ReportRecord.generated_at.desc(), ReportRecord.id.desc())
        .limit(1)
    ).scalar_one_or_none()
