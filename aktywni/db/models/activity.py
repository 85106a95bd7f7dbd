from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from aktywni.db.base import Base


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(64), nullable=False)
    distance_km = Column(Float, nullable=False, default=0)
    duration_min = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime(timezone=True), nullable=False, index=True)
    start_place = Column(String(255), nullable=True)
    end_place = Column(String(255), nullable=True)

    # Relationships
    user = relationship("User", backref="activities")
    points = relationship(
        "ActivityPoint",
        back_populates="activity",
        cascade="all, delete-orphan",
        order_by="ActivityPoint.timestamp",
    )
