from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from aktywni.db.models.activity import Activity as ActivityModel
from aktywni.db.models.activity_point import ActivityPoint as ActivityPointModel
from aktywni.errors import NotFoundError


def get_activity_by_id(db: Session, activity_id: int) -> ActivityModel | None:
    """Get an activity by ID."""
    return db.query(ActivityModel).filter(ActivityModel.id == activity_id).first()


def get_activities(
    db: Session,
    user_id: int | None = None,
    type: str | None = None,
    name_contains: str | None = None,
    min_distance: float | None = None,
    max_distance: float | None = None,
    started_from: datetime | None = None,
    started_to: datetime | None = None,
) -> list[ActivityModel]:
    """Get activities, newest first, optionally filtered. All bounds are inclusive."""
    query = db.query(ActivityModel)

    if user_id is not None:
        query = query.filter(ActivityModel.user_id == user_id)
    if type:
        query = query.filter(ActivityModel.type == type)
    if name_contains:
        query = query.filter(ActivityModel.name.like(f"%{name_contains}%"))
    if min_distance is not None:
        query = query.filter(ActivityModel.distance_km >= min_distance)
    if max_distance is not None:
        query = query.filter(ActivityModel.distance_km <= max_distance)
    if started_from is not None:
        query = query.filter(ActivityModel.started_at >= started_from)
    if started_to is not None:
        query = query.filter(ActivityModel.started_at <= started_to)

    return query.order_by(ActivityModel.started_at.desc(), ActivityModel.id.desc()).all()


def create_activity(
    db: Session,
    user_id: int,
    name: str,
    type: str,
    started_at: datetime,
    distance_km: float = 0,
    duration_min: int = 0,
    start_place: str | None = None,
    end_place: str | None = None,
) -> ActivityModel:
    """Create a new activity in the database. Pure data access - no business logic."""
    db_activity = ActivityModel(
        user_id=user_id,
        name=name,
        type=type,
        distance_km=distance_km,
        duration_min=duration_min,
        started_at=started_at,
        start_place=start_place,
        end_place=end_place,
    )
    db.add(db_activity)
    db.commit()
    db.refresh(db_activity)
    return db_activity


def delete_activity(db: Session, activity_id: int) -> None:
    """Delete an activity together with its track."""
    activity = get_activity_by_id(db, activity_id)
    if not activity:
        raise NotFoundError("Activity not found")

    db.delete(activity)
    db.commit()


def get_track_points(db: Session, activity_id: int) -> list[ActivityPointModel]:
    """Get the track of an activity ordered by timestamp."""
    return (
        db.query(ActivityPointModel)
        .filter(ActivityPointModel.activity_id == activity_id)
        .order_by(ActivityPointModel.timestamp, ActivityPointModel.id)
        .all()
    )


def replace_track_points(
    db: Session, activity_id: int, points: list[tuple[float, float, datetime]]
) -> None:
    """Replace the whole track of an activity with ``(lat, lon, timestamp)`` points."""
    db.query(ActivityPointModel).filter(
        ActivityPointModel.activity_id == activity_id
    ).delete(synchronize_session=False)
    db.add_all(
        ActivityPointModel(activity_id=activity_id, lat=lat, lon=lon, timestamp=timestamp)
        for lat, lon, timestamp in points
    )
    db.commit()


def get_activity_totals(db: Session) -> tuple[int, float]:
    """Return ``(activity count, total distance in km)``."""
    count, distance = db.query(
        func.count(ActivityModel.id),
        func.coalesce(func.sum(ActivityModel.distance_km), 0),
    ).one()
    return int(count), float(distance)
