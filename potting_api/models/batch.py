"""Batch model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from potting_api.database import Base


class Batch(Base):
    """One production run of the potting machine."""

    __tablename__ = "batches"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    seed_type = Column(Integer, nullable=False)
    output_count = Column(Integer, nullable=False)
    pots_done_count = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="Ongoing", index=True)
    # Status: Ongoing, Paused, Finished, Cancelled
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Batch(id={self.id}, status={self.status}, pots={self.pots_done_count}/{self.output_count})>"
