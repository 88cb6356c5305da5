"""Frontend serving routes.

Files that exist in the build directory are returned as they are; every other
GET path falls back to ``index.html`` so client-side routing can resolve it.
"""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, PlainTextResponse, Response

router = APIRouter(tags=["spa"])

BUILD_HINT = "Frontend not built. Run 'npm run build' and set DIST_DIR to the output directory"
DEFAULT_ROBOTS = "User-agent: *\nAllow: /\n"


def resolve_build_file(dist_dir: Path, relative: str) -> Optional[Path]:
    """
    Resolve a request path to a file inside the build directory.

    Args:
        dist_dir: Build directory
        relative: Path relative to the site root

    Returns:
        Existing file path, or None if the path is missing or escapes dist_dir
    """
    if not relative:
        return None
    root = dist_dir.resolve()
    candidate = (root / relative).resolve()
    if root not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


@router.get("/robots.txt", include_in_schema=False)
async def robots_txt(request: Request) -> Response:
    """Serve robots.txt from the build, or a permissive default."""
    robots = resolve_build_file(request.app.state.dist_dir, "robots.txt")
    if robots is not None:
        return FileResponse(robots, media_type="text/plain")
    return PlainTextResponse(DEFAULT_ROBOTS)


# Catch-all route - MUST be registered last in the app
@router.get("/{full_path:path}", include_in_schema=False)
async def serve_spa(request: Request, full_path: str = "") -> Response:
    """
    Serve a build file or the SPA entry point.

    Args:
        request: FastAPI request object
        full_path: Requested path

    Returns:
        File response

    Raises:
        HTTPException: 503 if the frontend has not been built
    """
    dist_dir: Path = request.app.state.dist_dir

    static_file = resolve_build_file(dist_dir, full_path)
    if static_file is not None:
        return FileResponse(static_file)

    index_file = dist_dir / "index.html"
    if not index_file.is_file():
        raise HTTPException(status_code=503, detail=BUILD_HINT)
    return FileResponse(index_file, media_type="text/html")
