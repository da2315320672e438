# SQLModel definitions; imported here to ensure metadata is populated for create_all.
from .base import IntIdMixin, TimestampMixin  # noqa: F401
from .task import Task, TaskLog  # noqa: F401
from .note import Note  # noqa: F401
from .activity import ActivityLog  # noqa: F401
from .trash import DeletedTask, DeletedTaskLog  # noqa: F401
