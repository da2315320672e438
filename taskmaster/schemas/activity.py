from pydantic import BaseModel, ConfigDict

from .common import UTCDateTime


class ActivityLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: UTCDateTime
    description: str
    created_at: UTCDateTime
