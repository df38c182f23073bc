from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the API and storage components along with deployment mode.
    """
    settings = request.app.state.settings

    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "storage": "initializing",
        },
        "ready": False
    }

    storage = getattr(request.app.state, "storage", None)
    storage_error = getattr(request.app.state, "storage_error", None)
    if storage is not None:
        health_status["components"]["storage"] = "ready"
    elif storage_error is not None:
        health_status["components"]["storage"] = f"error: {storage_error}"
        health_status["status"] = "degraded"

    health_status["ready"] = all(
        state == "ready" for state in health_status["components"].values()
    )

    return health_status
