"""Media mixin: scene stills, reconstruction videos, panoramas, time-lapses.

Split from session.py for maintainability.
Everything here either runs as a fire-and-forget task (created with
safe_create_task and tracked in ``self._tasks``) or is a cache lookup.
Results reach GameState only as events dispatched to ``self.store``.
"""

import asyncio
import logging

from ..enums import MediaCategory
from ..media.cache import MISS
from ..media.prompts import (
    location_panorama_prompt,
    npc_life_video_prompt,
    reconstruction_video_prompt,
    scene_image_prompt,
    time_lapse_prompt,
)
from ..utils.tasks import safe_create_task
from .errors import UnknownEntityError
from .events import (
    EventVideoResolved,
    NpcVideoResolved,
    SceneImageResolved,
    TimeLapseResolved,
    VideoGenerationStarted,
    VideoPlaybackChanged,
)
from .models import GameState, HistoricalEvent, LocalNPC

logger = logging.getLogger(__name__)

VIDEO_FAILED_NOTICE = (
    '*Frowns* "My memory is hazy... I cannot show you that vision clearly." '
    "(Video generation failed)"
)
TIME_LAPSE_FAILED_NOTICE = "Failed to generate time-lapse. Please try again."


def preparing_notice(event: HistoricalEvent) -> str:
    return (
        f"*Starts preparing a visual reconstruction of {event.title}...* "
        f'"Give me a moment to recall the details perfectly."'
    )


def explanation_notice(event: HistoricalEvent) -> str:
    return (
        f"*Gestures to the vision of {event.title}* "
        f'"Behold. {event.description} This moment changed everything..."'
    )


class MediaMixin:
    """Media generation for LivingHistorySession.

    Expects ``self.store``, ``self.media``, ``self.gateway``,
    ``self.session_id`` and ``self._tasks`` from the session.
    """

    def _spawn(self, coro, name: str) -> asyncio.Task:
        return safe_create_task(coro, name=f"{self.session_id}:{name}", registry=self._tasks)

    async def _generate_video_uri(self, prompt: str, category: MediaCategory, entity_id: str) -> str | None:
        """Run one Veo job, save the file, return its API URL (None on failure)."""
        asset = await self.gateway.request_video(prompt, label=f"{category}:{entity_id}")
        if asset is None:
            return None
        return self.gateway.publish(asset, self.session_id, category, entity_id)

    async def _generate_image_uri(self, prompt: str, label: str) -> str | None:
        asset = await self.gateway.request_image(prompt, label=label)
        return asset.to_data_uri() if asset else None

    # =========================================================================
    # Scene still
    # =========================================================================

    def _schedule_scene_image(self, state: GameState) -> asyncio.Task | None:
        """Request the still for ``state``'s scene version."""
        if state.atmosphere is None or state.era is None:
            return None
        return self._spawn(
            self._resolve_scene_image(
                state.scene_version, state.era, state.current_description, state.atmosphere,
            ),
            name=f"scene_image_v{state.scene_version}",
        )

    async def _resolve_scene_image(self, version: int, era: str, description: str, atmosphere) -> None:
        uri = await self._generate_image_uri(
            scene_image_prompt(era, description, atmosphere), label=f"scene v{version}",
        )
        # The reducer drops this if a newer scene arrived meanwhile
        self.store.dispatch(SceneImageResolved(scene_version=version, image_url=uri))

    # =========================================================================
    # Historical event videos
    # =========================================================================

    def _find_event(self, event_id: str) -> HistoricalEvent:
        for event in self.state.historical_events:
            if event.id == event_id:
                return event
        raise UnknownEntityError("historical event", event_id)

    async def play_event_video(self, event_id: str) -> str | None:
        """Play an event's reconstruction, generating it on first request.

        Returns:
            The video URI when it was already available; None when a
            generation was started (the result arrives as an event).
        """
        event = self._find_event(event_id)
        cache = self.media[MediaCategory.EVENT_VIDEO]

        cached = event.video_uri or cache.resolve(event.id)
        if cached is not MISS:
            await self.store.apply(VideoPlaybackChanged(cached, notice=explanation_notice(event)))
            return cached

        if cache.is_pending(event.id):
            return None

        await self.store.apply(VideoGenerationStarted(event.id, notice=preparing_notice(event)))
        self._spawn(self._resolve_event_video(event), name=f"event_video:{event.id}")
        return None

    async def _resolve_event_video(self, event: HistoricalEvent) -> None:
        cache = self.media[MediaCategory.EVENT_VIDEO]
        uri = await cache.get_or_generate(
            event.id,
            lambda: self._generate_video_uri(
                reconstruction_video_prompt(event.video_prompt), MediaCategory.EVENT_VIDEO, event.id,
            ),
        )
        notice = explanation_notice(event) if uri else VIDEO_FAILED_NOTICE
        self.store.dispatch(EventVideoResolved(event.id, uri, notice=notice))

    # =========================================================================
    # NPC daily-life videos
    # =========================================================================

    def _find_npc(self, npc_id: str) -> LocalNPC:
        for npc in self.state.nearby_characters:
            if npc.id == npc_id:
                return npc
        raise UnknownEntityError("npc", npc_id)

    async def generate_npc_video(self, npc_id: str) -> str | None:
        """Same contract as play_event_video, for a nearby character."""
        npc = self._find_npc(npc_id)
        cache = self.media[MediaCategory.NPC_VIDEO]

        cached = npc.video_uri or cache.resolve(npc.id)
        if cached is not MISS:
            await self.store.apply(VideoPlaybackChanged(cached))
            return cached

        if cache.is_pending(npc.id):
            return None

        await self.store.apply(VideoGenerationStarted(npc.id))
        self._spawn(self._resolve_npc_video(npc), name=f"npc_video:{npc.id}")
        return None

    async def _resolve_npc_video(self, npc: LocalNPC) -> None:
        era = self.state.era
        cache = self.media[MediaCategory.NPC_VIDEO]
        uri = await cache.get_or_generate(
            npc.id,
            lambda: self._generate_video_uri(
                npc_life_video_prompt(era, npc), MediaCategory.NPC_VIDEO, npc.id,
            ),
        )
        self.store.dispatch(NpcVideoResolved(npc.id, uri, notice=None if uri else VIDEO_FAILED_NOTICE))

    # =========================================================================
    # Map panoramas
    # =========================================================================

    async def view_location(self, location_id: str) -> str | None:
        """Panoramic still for a map pin, generated once per pin and cached."""
        state = self.state
        location = next((loc for loc in state.map_locations if loc.id == location_id), None)
        if location is None:
            raise UnknownEntityError("map location", location_id)

        cache = self.media[MediaCategory.LOCATION_VISUAL]
        return await cache.get_or_generate(
            location.id,
            lambda: self._generate_image_uri(
                location_panorama_prompt(state.era, location), label=f"location {location.name}",
            ),
        )

    # =========================================================================
    # Time-lapse
    # =========================================================================

    async def generate_time_lapse(self, subject: str) -> str | None:
        """Bird's-eye time-lapse of ``subject``; same contract as play_event_video."""
        subject = subject.strip()
        if not subject:
            raise ValueError("Time-lapse subject must not be empty")
        self._require_era()

        cache = self.media[MediaCategory.TIME_LAPSE]
        cached = cache.resolve(subject)
        if cached is not MISS:
            await self.store.apply(VideoPlaybackChanged(cached))
            return cached

        if cache.is_pending(subject):
            return None

        await self.store.apply(VideoGenerationStarted(f"timelapse:{subject}"))
        self._spawn(self._resolve_time_lapse(subject), name=f"time_lapse:{subject[:40]}")
        return None

    async def _resolve_time_lapse(self, subject: str) -> None:
        era = self.state.era
        cache = self.media[MediaCategory.TIME_LAPSE]
        uri = await cache.get_or_generate(
            subject,
            lambda: self._generate_video_uri(
                time_lapse_prompt(era, subject), MediaCategory.TIME_LAPSE, subject,
            ),
        )
        self.store.dispatch(
            TimeLapseResolved(subject, uri, notice=None if uri else TIME_LAPSE_FAILED_NOTICE)
        )

    # =========================================================================
    # Task lifecycle
    # =========================================================================

    async def wait_for_media(self) -> GameState:
        """Wait for every media task (including ones they spawn), then drain the store."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        return await self.store.drain()

    async def _cancel_media(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"[{self.session_id}] cancelled {len(tasks)} media task(s)")
