from fastapi import APIRouter
from app.api.v1 import deployments
from app.config import settings
from app.dependencies import get_reconciliation_worker

router = APIRouter()

router.include_router(deployments.router, prefix="/api/v1")


@router.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs",
        "deployments": "/api/v1/deployments"
    }


@router.get("/health")
async def health():
    return {"status": "healthy"}


@router.get("/worker/status")
async def worker_status():
    try:
        worker = get_reconciliation_worker()
        is_running = worker.running
        has_task = worker._task is not None
        task_done = worker._task.done() if has_task else True
        is_healthy = worker.is_healthy()

        return {
            "running": is_running,
            "healthy": is_healthy,
            "task_exists": has_task,
            "task_done": task_done,
            "last_run": worker.last_run,
            "status": "healthy" if is_healthy else "unhealthy"
        }

    except Exception as e:
        return {
            "running": False,
            "healthy": False,
            "error": str(e),
            "status": "error"
        }
