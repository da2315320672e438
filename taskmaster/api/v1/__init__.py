"""
API v1 Router

Every endpoint below requires an authenticated session (see core.auth.require_auth).
"""

from fastapi import APIRouter, Depends

from taskmaster import __version__
from taskmaster.core.auth import require_auth

from . import activity, assistant, momento, notes, task_logs, tasks, trash

router = APIRouter(dependencies=[Depends(require_auth)])

router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(task_logs.router, prefix="/tasks/{task_id}/logs", tags=["Task Logs"])
router.include_router(notes.router, prefix="/notes", tags=["Notes"])
router.include_router(trash.router, prefix="/trash", tags=["Trash"])
router.include_router(activity.router, prefix="/activity-log", tags=["Activity"])
router.include_router(momento.router, prefix="/momento", tags=["Momento"])
router.include_router(assistant.router, prefix="/assistant", tags=["Assistant"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: version and available endpoints."""
    return {
        "api": "v1",
        "version": __version__,
        "endpoints": [
            "/tasks",
            "/tasks/{task_id}/logs",
            "/notes",
            "/trash",
            "/activity-log",
            "/momento",
            "/assistant",
        ],
    }
