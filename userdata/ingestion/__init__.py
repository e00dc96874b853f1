"""ingestion sub-package — audience member, event, and request payload builders."""

from userdata.ingestion.members import build_user_data, build_audience_member, build_audience_members
from userdata.ingestion.events import build_event, build_events
from userdata.ingestion.requests import (
    build_destination,
    build_audience_members_requests,
    build_events_requests,
)

__all__ = [
    "build_user_data",
    "build_audience_member",
    "build_audience_members",
    "build_event",
    "build_events",
    "build_destination",
    "build_audience_members_requests",
    "build_events_requests",
]
