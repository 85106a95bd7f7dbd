from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

import aktywni.repositories.activity as activity_repo
import aktywni.repositories.user as user_repo
from aktywni.api.deps import get_db, require_roles
from aktywni.db.models.user import ROLE_ADMIN, User as UserModel
from aktywni.schemas.activity import Activity, Stats
from aktywni.schemas.user import AdminUser
from aktywni.services import activity as activity_service

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=list[AdminUser])
def get_all_users(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(ROLE_ADMIN)),
):
    """List all users ordered by ID. Only admin users can access this endpoint."""
    return [AdminUser.model_validate(u) for u in user_repo.get_all_users(db)]


@router.get("/activities", response_model=list[Activity])
def search_activities(
    user_id: int | None = Query(None, alias="userId"),
    type: str | None = Query(None),
    q: str | None = Query(None, description="Name contains (case-sensitivity depends on the database)"),
    min_distance: float | None = Query(None, alias="minDistance", ge=0),
    max_distance: float | None = Query(None, alias="maxDistance", ge=0),
    date_from: str | None = Query(None, alias="dateFrom", description="ISO date; ignored if unparsable"),
    date_to: str | None = Query(None, alias="dateTo", description="ISO date; ignored if unparsable"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(ROLE_ADMIN)),
):
    """Search activities with optional filters, newest first."""
    activities = activity_service.search_activities(
        db,
        user_id=user_id,
        type=type,
        q=q,
        min_distance=min_distance,
        max_distance=max_distance,
        date_from=date_from,
        date_to=date_to,
    )
    return [Activity.model_validate(a) for a in activities]


@router.delete("/activities/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity(
    activity_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(ROLE_ADMIN)),
):
    """Delete an activity and its track."""
    activity_repo.delete_activity(db, activity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stats", response_model=Stats)
def get_stats(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles(ROLE_ADMIN)),
):
    total_activities, total_distance = activity_repo.get_activity_totals(db)
    return Stats(
        total_users=user_repo.count_users(db),
        total_activities=total_activities,
        total_distance=total_distance,
    )
