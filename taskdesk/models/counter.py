"""
Named counters used as an atomic sequence primitive.
"""
from sqlalchemy import Column, String, BigInteger, DateTime
from datetime import datetime

from ..database import Base


class IdCounter(Base):
    """
    Holds the last value handed out for a named sequence.

    Incremented with a single ``UPDATE ... SET value = value + 1`` so the row
    lock serialises concurrent allocations until the creating transaction
    commits.
    """
    __tablename__ = "id_counters"

    name = Column(String(64), primary_key=True)
    value = Column(BigInteger, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<IdCounter {self.name}={self.value}>"
