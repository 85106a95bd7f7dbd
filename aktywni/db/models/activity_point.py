from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship

from aktywni.db.base import Base


class ActivityPoint(Base):
    __tablename__ = "activity_points"
    __table_args__ = (
        Index("ix_activity_points_activity_id_timestamp", "activity_id", "timestamp"),
    )

    id = Column(Integer, primary_key=True, index=True)
    activity_id = Column(Integer, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False)
    lat = Column(Float, nullable=False)
    lon = Column(Float, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    activity = relationship("Activity", back_populates="points")
