"""Media generation service for scene images, panoramas, and reconstruction videos.

Uses Google's Gemini Image Generation API for stills and the Veo API for
short videos.

Architecture:
- Every operation is a single attempt; failures are logged and surface as None
- Stills are returned in memory (callers embed them as data URIs)
- Videos are downloaded with an authenticated fetch, then written under
  data/media/{session_id}/{category}/ so the API can serve them
"""

import asyncio
import base64
import hashlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from ..config import Config
from ..llm.errors import GatewayError
from .polling import poll_until_done

logger = logging.getLogger(__name__)

MIME_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
}


@dataclass(frozen=True)
class MediaAsset:
    """Binary payload returned by an image or video generation."""

    data: bytes
    mime_type: str

    def to_data_uri(self) -> str:
        """Inline the payload as a ``data:`` URI."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    @property
    def extension(self) -> str:
        return MIME_EXTENSIONS.get(self.mime_type, ".bin")


class MediaGenerator:
    """Image/video generation using Google's Gemini Image + Veo APIs.

    Videos written by save_asset() are stored as:
        data/media/{session_id}/{category}/{name}{ext}
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        image_model: str | None = None,
        video_model: str | None = None,
        media_dir: Path | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize MediaGenerator.

        Args:
            api_key: Google API key. Falls back to Config.GOOGLE_API_KEY.
            image_model: Override for Config.IMAGE_MODEL
            video_model: Override for Config.VIDEO_MODEL
            media_dir: Root for saved assets (Config.MEDIA_DIR by default)
            http_transport: Optional httpx transport for video downloads
        """
        self._api_key = api_key if api_key is not None else Config.GOOGLE_API_KEY
        self.image_model = image_model or Config.IMAGE_MODEL
        self.video_model = video_model or Config.VIDEO_MODEL
        self.media_dir = media_dir or Config.MEDIA_DIR
        self._http_transport = http_transport
        self._client = None

    def _ensure_client(self):
        """Lazy-init the Google GenAI client."""
        if self._client is None:
            from google import genai
            self._client = genai.Client(api_key=self._api_key)

    async def _run_blocking(self, fn):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn)

    # =====================================================================
    # Stills
    # =====================================================================

    async def generate_image(self, prompt: str, label: str = "image") -> MediaAsset | None:
        """Generate a still image and return the first inline image part.

        Returns:
            MediaAsset, or None if the reply carried no image or the call failed.
        """
        try:
            self._ensure_client()
            response = await self._run_blocking(
                lambda: self._client.models.generate_content(
                    model=self.image_model,
                    contents=prompt,
                    config={"response_modalities": ["IMAGE", "TEXT"]},
                )
            )

            if response.candidates and response.candidates[0].content:
                for part in response.candidates[0].content.parts or []:
                    inline = getattr(part, "inline_data", None)
                    if inline and inline.data:
                        logger.info(f"Image generated for {label} ({len(inline.data)} bytes)")
                        return MediaAsset(data=inline.data, mime_type=inline.mime_type or "image/png")

            logger.info(f"No image in response for {label}")
            return None

        except Exception as e:
            logger.error(f"Image generation failed for {label}: {e}")
            return None

    # =====================================================================
    # Video (Veo long-running job)
    # =====================================================================

    async def generate_video(
        self,
        prompt: str,
        label: str = "video",
        *,
        poll_interval: float | None = None,
        max_polls: int | None = None,
        timeout: float | None = None,
    ) -> MediaAsset | None:
        """Generate a short video via Veo.

        Submits the job, polls the operation until done (bounded), then
        fetches the resulting file.

        Returns:
            MediaAsset, or None on failure or timeout at any stage.
        """
        interval = Config.VIDEO_POLL_INTERVAL if poll_interval is None else poll_interval
        attempts = Config.VIDEO_MAX_POLLS if max_polls is None else max_polls
        budget = Config.VIDEO_TIMEOUT if timeout is None else timeout

        try:
            self._ensure_client()

            logger.info(f"Starting Veo generation for {label} ({self.video_model})...")
            operation = await self._run_blocking(
                lambda: self._client.models.generate_videos(
                    model=self.video_model,
                    prompt=prompt,
                    config={
                        "number_of_videos": 1,
                        "resolution": "720p",
                        "aspect_ratio": "16:9",
                    },
                )
            )

            async def _refresh(op):
                return await self._run_blocking(lambda: self._client.operations.get(op))

            operation = await poll_until_done(
                operation,
                _refresh,
                lambda op: bool(getattr(op, "done", False)),
                interval=interval,
                max_attempts=attempts,
                timeout=budget,
                label=f"veo:{label}",
            )

            error = getattr(operation, "error", None)
            if error:
                logger.error(f"Veo job for {label} finished with error: {error}")
                return None

            video = self._first_video(operation)
            if video is None:
                logger.info(f"No video in Veo response for {label}")
                return None

            mime_type = getattr(video, "mime_type", None) or "video/mp4"
            inline = getattr(video, "video_bytes", None)
            if inline:
                return MediaAsset(data=inline, mime_type=mime_type)

            uri = getattr(video, "uri", None)
            if not uri:
                logger.info(f"Veo video for {label} has neither bytes nor uri")
                return None

            data = await self._download(uri)
            logger.info(f"Video generated for {label} ({len(data)} bytes)")
            return MediaAsset(data=data, mime_type=mime_type)

        except Exception as e:
            logger.error(f"Video generation failed for {label}: {e}")
            return None

    @staticmethod
    def _first_video(operation: Any) -> Any | None:
        response = getattr(operation, "response", None) or getattr(operation, "result", None)
        videos = getattr(response, "generated_videos", None) if response else None
        if not videos:
            return None
        return getattr(videos[0], "video", None)

    async def _download(self, uri: str) -> bytes:
        """Fetch a generated file; the API key authenticates the request."""
        async with httpx.AsyncClient(
            transport=self._http_transport,
            follow_redirects=True,
            timeout=120.0,
        ) as http:
            response = await http.get(uri, headers={"x-goog-api-key": self._api_key})
            if response.status_code >= 400:
                raise GatewayError(f"Video download failed with HTTP {response.status_code}")
            return response.content

    # =====================================================================
    # Storage
    # =====================================================================

    def _sanitize_name(self, name: str) -> str:
        """Sanitize entity id for use as filename."""
        return re.sub(r"[^a-z0-9_\-]", "_", name.lower())[:80]

    def _file_stem(self, name: str) -> str:
        """Collision-free file stem for ``name``.

        Names that are already safe (entity ids) are kept as-is; anything the
        sanitizer alters gets a digest of the raw name appended, so two
        subjects that sanitize alike never share a file.
        """
        safe = self._sanitize_name(name)
        if safe == name:
            return safe
        digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:12]
        return f"{safe[:60]}_{digest}"

    def save_asset(self, asset: MediaAsset, session_id: str, category: str, name: str) -> Path:
        """Write an asset under the session's media folder and return its path."""
        directory = self.media_dir / self._sanitize_name(session_id) / category
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{self._file_stem(name)}{asset.extension}"
        path.write_bytes(asset.data)
        logger.info(f"Media saved: {path}")
        return path

    def get_media_url(self, path: Path) -> str:
        """Build the relative API URL for a file written by save_asset()."""
        session_dir, category, filename = path.parts[-3:]
        return f"/api/game/media/{session_dir}/{category}/{filename}"
