"""Media routes: map panoramas, time-lapses, and generated file serving.

Serves generated videos from data/media/{session_id}/{category}/.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import FileResponse

from chronos.config import Config
from chronos.core.session import LivingHistorySession
from chronos.enums import MediaCategory

from .gameplay import video_response
from .models import LocationVisualResponse, TimeLapseRequest, VideoResponse
from .session_mgmt import get_session

logger = logging.getLogger(__name__)

router = APIRouter()

# Allowed subdirectories (prevent path traversal)
ALLOWED_CATEGORIES = {category.value for category in MediaCategory}

# MIME types by extension
MIME_MAP = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}


@router.get("/sessions/{session_id}/locations/{location_id}/visual", response_model=LocationVisualResponse)
async def location_visual(location_id: str, session: LivingHistorySession = Depends(get_session)):
    """Panoramic view of a map location (generated once, then cached)."""
    image_url = await session.view_location(location_id)
    return LocationVisualResponse(location_id=location_id, image_url=image_url)


@router.post("/sessions/{session_id}/timelapse", response_model=VideoResponse)
async def time_lapse(
    request: TimeLapseRequest,
    response: Response,
    session: LivingHistorySession = Depends(get_session),
):
    """Bird's-eye time-lapse of a subject across the era."""
    uri = await session.generate_time_lapse(request.subject)
    return video_response(response, request.subject, uri)


@router.get("/media/{session_id}/{category}/{filename}")
async def serve_media(session_id: str, category: str, filename: str):
    """Serve a generated file.

    URL pattern matches what MediaGenerator.get_media_url() produces:
        /api/game/media/{session_id}/{category}/{filename}
    """
    if category not in ALLOWED_CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Invalid category: {category}")

    base_dir = Config.MEDIA_DIR.resolve()
    file_path = (base_dir / session_id / category / filename).resolve()

    # Resolve to catch ../ tricks
    if not file_path.is_relative_to(base_dir):
        raise HTTPException(status_code=403, detail="Access denied")

    if not file_path.is_file():
        raise HTTPException(status_code=404, detail="Media not found")

    media_type = MIME_MAP.get(file_path.suffix.lower(), "application/octet-stream")

    return FileResponse(
        path=str(file_path),
        media_type=media_type,
        headers={
            "Cache-Control": "public, max-age=86400",  # Cache for 24h, files never change
        },
    )
