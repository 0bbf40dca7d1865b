from sqlalchemy import Column, Integer, String
from app.core.db import Base


class SequenceCounter(Base):
    """Named counter advanced with a single UPDATE ... RETURNING."""

    __tablename__ = "sequence_counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<SequenceCounter {self.name}={self.value}>"
