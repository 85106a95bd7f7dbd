from aktywni.db.models.user import User
from aktywni.db.models.activity import Activity
from aktywni.db.models.activity_point import ActivityPoint

__all__ = ["User", "Activity", "ActivityPoint"]
