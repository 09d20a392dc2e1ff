"""Machine state model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from potting_api.database import Base

SINGLETON_KEY = "main"


class MachineState(Base):
    """Singleton record of supply levels and the active batch."""

    __tablename__ = "machine_state"

    id = Column(Integer, primary_key=True)
    singleton_key = Column(String(20), nullable=False, unique=True, default=SINGLETON_KEY)
    soil_level = Column(Integer, nullable=False, default=1)  # 0 = Low, 1 = Sufficient
    cup_level = Column(Integer, nullable=False, default=1)  # 0 = Low, 1 = Sufficient
    # Plain lookup key, no foreign key: batches are deleted independently
    active_batch_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return (
            f"<MachineState(soil={self.soil_level}, cup={self.cup_level}, "
            f"active_batch_id={self.active_batch_id})>"
        )
