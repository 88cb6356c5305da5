"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> dict:
    """
    Report liveness and whether the SPA build is present.

    Args:
        request: FastAPI request object

    Returns:
        Status payload
    """
    dist_dir = request.app.state.dist_dir
    return {
        "status": "ok",
        "build": (dist_dir / "index.html").is_file(),
        "version": request.app.version,
    }
