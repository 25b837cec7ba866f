from sqlalchemy import BigInteger, Column, Enum, Index, Integer, String

from arrival_log.models.base import Base
from arrival_log.schemas.arrival_schema import EventType


class ArrivalEventRow(Base):
    __tablename__ = 'arrival_events'
    __table_args__ = (
        Index('ix_arrival_events_created_at_id', 'created_at', 'id'),
        {'sqlite_autoincrement': True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(BigInteger, nullable=False)  # ms since epoch, client clock
    type = Column(
        Enum(EventType, native_enum=False, create_constraint=True, length=16, name='arrival_event_type'),
        nullable=False,
        default=EventType.ARRIVAL,
        server_default=EventType.ARRIVAL.value,
    )
    formatted_time = Column(String(32), nullable=False)
    created_at = Column(Integer, nullable=False)  # seconds since epoch, store clock

    def __repr__(self):
        return f"<ArrivalEventRow(id={self.id}, type='{self.type.value}', timestamp={self.timestamp})>"
