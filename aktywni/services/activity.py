from datetime import datetime

from sqlalchemy.orm import Session

import aktywni.repositories.activity as activity_repo
import aktywni.repositories.user as user_repo
from aktywni.core.timeutil import to_utc
from aktywni.db.models.activity import Activity as ActivityModel
from aktywni.db.models.activity_point import ActivityPoint as ActivityPointModel
from aktywni.db.models.user import ROLE_ADMIN, User as UserModel
from aktywni.errors import ForbiddenError, NotFoundError
from aktywni.schemas.activity import ActivityCreate, TrackPoint
from aktywni.services.gpx import build_gpx


def _ensure_can_write(current_user: UserModel, owner_id: int) -> None:
    if current_user.role != ROLE_ADMIN and current_user.id != owner_id:
        raise ForbiddenError("You can only modify your own activities")


def get_activity(db: Session, activity_id: int) -> ActivityModel:
    activity = activity_repo.get_activity_by_id(db, activity_id)
    if not activity:
        raise NotFoundError("Activity not found")
    return activity


def create_activity(
    db: Session, data: ActivityCreate, current_user: UserModel
) -> ActivityModel:
    """
    Record a new activity.

    - Owner defaults to the current user
    - Only admins may record activities for someone else

    Raises:
        ForbiddenError: Non-admin creating an activity for another user
        NotFoundError: Owner does not exist
    """
    owner_id = data.user_id if data.user_id is not None else current_user.id
    _ensure_can_write(current_user, owner_id)
    if owner_id != current_user.id and not user_repo.get_user_by_id(db, owner_id):
        raise NotFoundError("User not found")

    return activity_repo.create_activity(
        db,
        user_id=owner_id,
        name=data.name,
        type=data.type,
        distance_km=data.distance_km,
        duration_min=data.duration_min,
        started_at=to_utc(data.started_at),
        start_place=data.start_place,
        end_place=data.end_place,
    )


def get_track(db: Session, activity_id: int) -> list[ActivityPointModel]:
    get_activity(db, activity_id)
    return activity_repo.get_track_points(db, activity_id)


def replace_track(
    db: Session,
    activity_id: int,
    points: list[TrackPoint],
    current_user: UserModel,
) -> None:
    """Replace the GPS track of an activity (old points are dropped)."""
    activity = get_activity(db, activity_id)
    _ensure_can_write(current_user, activity.user_id)
    activity_repo.replace_track_points(
        db,
        activity_id,
        [(p.lat, p.lon, to_utc(p.timestamp)) for p in points],
    )


def export_gpx(db: Session, activity_id: int) -> str:
    activity = get_activity(db, activity_id)
    points = activity_repo.get_track_points(db, activity_id)
    if not points:
        raise NotFoundError("Track not found")
    return build_gpx(activity, points)


def parse_date_filter(value: str | None) -> datetime | None:
    """Parse an ISO date/datetime query value; unparsable values are ignored (None)."""
    if not value:
        return None
    try:
        return to_utc(datetime.fromisoformat(value))
    except ValueError:
        return None


def search_activities(
    db: Session,
    user_id: int | None = None,
    type: str | None = None,
    q: str | None = None,
    min_distance: float | None = None,
    max_distance: float | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
) -> list[ActivityModel]:
    return activity_repo.get_activities(
        db,
        user_id=user_id,
        type=type,
        name_contains=q,
        min_distance=min_distance,
        max_distance=max_distance,
        started_from=parse_date_filter(date_from),
        started_to=parse_date_filter(date_to),
    )
