from datetime import datetime
from enum import Enum
from typing import Annotated, Optional

from fastapi import Path
from pydantic import AfterValidator, BaseModel

from taskmaster.core.timeutils import ensure_utc


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Stores such as SQLite hand back naive datetimes; responses always carry UTC.
UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]

# Largest value a SQLite INTEGER (and a Postgres BIGINT) can hold.
MAX_ROW_ID = 2**63 - 1

RowId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


class APIError(BaseModel):
    error: str


class OkResponse(BaseModel):
    ok: bool = True
    message: Optional[str] = None


def blank_to_none(value):
    """Treat None, "" and whitespace-only strings as "not supplied"."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip() == "":
        return None
    return value
