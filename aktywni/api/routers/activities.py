from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from aktywni.api.deps import get_current_user, get_db
from aktywni.db.models.user import User as UserModel
from aktywni.schemas.activity import (
    Activity,
    ActivityCreate,
    ActivityCreated,
    Track,
    TrackPoint,
    TrackUpdate,
)
from aktywni.services import activity as activity_service
from aktywni.services.gpx import GPX_MEDIA_TYPE, gpx_filename

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("", response_model=list[Activity])
def list_activities(
    user_id: int | None = Query(None, alias="userId", description="Only this user's activities"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """List activities, newest first."""
    activities = activity_service.search_activities(db, user_id=user_id)
    return [Activity.model_validate(a) for a in activities]


@router.post("", response_model=ActivityCreated, status_code=status.HTTP_201_CREATED)
def create_activity(
    activity_data: ActivityCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Record an activity (mobile upload).

    user_id defaults to the caller; only admins may record for someone else.
    """
    activity = activity_service.create_activity(db, activity_data, current_user)
    return ActivityCreated(id=activity.id)


@router.get("/{activity_id}", response_model=Activity)
def get_activity(
    activity_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return Activity.model_validate(activity_service.get_activity(db, activity_id))


@router.get("/{activity_id}/track", response_model=Track)
def get_track(
    activity_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Get the GPS track of an activity ordered by timestamp."""
    points = activity_service.get_track(db, activity_id)
    return Track(
        activity_id=activity_id,
        points=[TrackPoint.model_validate(p) for p in points],
    )


@router.put("/{activity_id}/track", status_code=status.HTTP_204_NO_CONTENT)
def replace_track(
    activity_id: int,
    track: TrackUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Replace the GPS track of an activity with the uploaded points."""
    activity_service.replace_track(db, activity_id, track.points, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{activity_id}/export.gpx", response_class=Response)
def export_gpx(
    activity_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Download the track as a GPX 1.1 file."""
    gpx = activity_service.export_gpx(db, activity_id)
    return Response(
        content=gpx,
        media_type=GPX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{gpx_filename(activity_id)}"'},
    )
