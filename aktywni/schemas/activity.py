from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from aktywni.core.timeutil import isoformat_z


class Activity(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    type: str
    distance_km: float
    duration_min: int
    started_at: datetime
    start_place: str | None = None
    end_place: str | None = None

    @field_serializer("started_at")
    def serialize_started_at(self, value: datetime) -> str:
        return isoformat_z(value)


class ActivityCreate(BaseModel):
    user_id: int | None = Field(None, description="Owner; defaults to the current user")
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=64)
    distance_km: float = Field(0, ge=0)
    duration_min: int = Field(0, ge=0)
    started_at: datetime
    start_place: str | None = Field(None, max_length=255)
    end_place: str | None = Field(None, max_length=255)


class ActivityCreated(BaseModel):
    id: int


class TrackPoint(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    timestamp: datetime

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        return isoformat_z(value)


class Track(BaseModel):
    activity_id: int
    points: list[TrackPoint]


class TrackUpdate(BaseModel):
    points: list[TrackPoint] = Field(..., min_length=1)


class Stats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_users: int = Field(..., alias="totalUsers")
    total_activities: int = Field(..., alias="totalActivities")
    total_distance: float = Field(..., alias="totalDistance")
