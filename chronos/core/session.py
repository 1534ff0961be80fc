"""Living History session: one player in one era.

Composed from:

    LivingHistorySession  – era start, navigation, chat, divergence, custom events
    MediaMixin            – stills, videos, panoramas, time-lapses (background)

Every state change is an event applied through ``self.store``; this class
never assigns GameState fields itself.
"""

import asyncio
import logging
import uuid
from collections import defaultdict
from contextlib import asynccontextmanager

from ..agents.chat import EXPERT_NAME, EXPERT_ROLE, VIDEO_CONTEXT, HistorianChatAgent, NpcChatAgent
from ..agents.chronicler import Chronicler
from ..agents.divergence import DivergenceAgent
from ..agents.era_briefing import EraBriefer
from ..agents.navigator import ARRIVAL_ACTION, ARRIVAL_LOCATION, SceneNavigator, arrival_description
from ..agents.simulation import RoleAssigner
from ..enums import NavigationAction
from ..gateway import AIGateway, get_gateway
from ..media.cache import MediaLibrary
from ._media import MediaMixin
from .conversation import ChannelRegistry, ConversationChannel
from .errors import SessionBusyError, SessionNotStartedError, UnknownEntityError
from .events import (
    ActiveNpcSelected,
    ConfidenceLayerToggled,
    CustomEventsAdded,
    DivergenceApplied,
    EraStarted,
    NavigationApplied,
    NoticePosted,
    SceneLoading,
    VideoPlaybackChanged,
)
from .models import DivergenceResult, GameState, HistoricalEvent, Message
from .store import GameStore

logger = logging.getLogger(__name__)

DIVERGENCE_FAILED_NOTICE = "The timeline resisted your change. Try again."
NO_RECORD_NOTICE = "The chronicles hold no record of that."


class LivingHistorySession(MediaMixin):
    """Orchestrates agents, media and conversation for one session.

    Text requests (era change, navigation, divergence, custom event) are
    exclusive: a second one while the first is in flight raises
    SessionBusyError. Chat and media requests are not restricted.
    """

    def __init__(self, session_id: str | None = None, gateway: AIGateway | None = None):
        """Initialize the session.

        Args:
            session_id: Stable id (generated when omitted); names the media folder
            gateway: Gateway to use (defaults to the process-wide one)
        """
        self.session_id = session_id or uuid.uuid4().hex
        self._gateway = gateway

        self.store = GameStore(name=f"session-{self.session_id[:8]}")
        self.media = MediaLibrary()
        self.channels = ChannelRegistry(EXPERT_NAME, EXPERT_ROLE)

        # Agents
        self.role_assigner = RoleAssigner(gateway)
        self.era_briefer = EraBriefer(gateway)
        self.navigator = SceneNavigator(gateway)
        self.chronicler = Chronicler(gateway)
        self.divergence = DivergenceAgent(gateway)
        self.npc_chat = NpcChatAgent(gateway)
        self.historian_chat = HistorianChatAgent(gateway)

        # Background media tasks, kept alive until they finish
        self._tasks: set[asyncio.Task] = set()

        # Exclusive text request in flight
        self._text_busy: str | None = None

        # One chat turn at a time per channel so history stays user/reply paired
        self._chat_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def gateway(self) -> AIGateway:
        return self._gateway or get_gateway()

    @property
    def state(self) -> GameState:
        return self.store.state

    @property
    def is_busy(self) -> bool:
        return self._text_busy is not None

    def _require_era(self) -> str:
        era = self.state.era
        if era is None:
            raise SessionNotStartedError("Select an era first")
        return era

    @asynccontextmanager
    async def _text_request(self, what: str):
        """Claim the exclusive text slot for ``what``."""
        if self._text_busy is not None:
            raise SessionBusyError(f"Cannot start {what}: {self._text_busy} in progress")
        self._text_busy = what
        try:
            yield
        finally:
            self._text_busy = None

    # =========================================================================
    # Era
    # =========================================================================

    async def initialize_era(self, era: str) -> GameState:
        """Reset onto ``era``: role, briefing, then the arrival scene.

        Conversations and media caches from the previous era are dropped and
        its outstanding media tasks cancelled.
        """
        era = str(era).strip()
        if not era:
            raise ValueError("Era must not be empty")

        async with self._text_request("era change"):
            logger.info(f"[{self.session_id}] Initializing era: {era}")
            await self._cancel_media()
            await self.store.apply(SceneLoading(stop_playback=True))
            self.channels.clear()
            self.media.clear()

            simulation, briefing = await asyncio.gather(
                self.role_assigner.start_simulation(era),
                self.era_briefer.brief(era),
            )
            await self.store.apply(EraStarted(
                era=era,
                simulation=simulation,
                map_locations=briefing.map_locations,
                perspectives=briefing.perspectives,
            ))

            result = await self.navigator.navigate(
                era, ARRIVAL_LOCATION, arrival_description(era), ARRIVAL_ACTION, simulation,
            )
            state = await self.store.apply(NavigationApplied(result))

        self._schedule_scene_image(state)
        return state

    # =========================================================================
    # Navigation
    # =========================================================================

    async def navigate(self, action: NavigationAction | str) -> GameState:
        """Advance the world by one action and request the new still."""
        era = self._require_era()
        detail = action.detail if isinstance(action, NavigationAction) else str(action).strip()
        if not detail:
            raise ValueError("Action must not be empty")

        async with self._text_request("navigation"):
            snapshot = await self.store.apply(SceneLoading(stop_playback=True))
            result = await self.navigator.navigate(
                era,
                snapshot.current_location,
                snapshot.current_description,
                detail,
                snapshot.simulation,
            )
            state = await self.store.apply(NavigationApplied(result))

        logger.info(f"[{self.session_id}] {detail} -> {state.current_location}")
        self._schedule_scene_image(state)
        return state

    # =========================================================================
    # Conversation
    # =========================================================================

    def _persona_for(self, npc_name: str | None) -> tuple[str, str]:
        state = self.state
        if npc_name is None or npc_name == state.active_npc_name:
            if not state.active_npc_name:
                raise UnknownEntityError("npc", npc_name or "")
            return state.active_npc_name, state.active_npc_role or ""
        for npc in state.nearby_characters:
            if npc.name == npc_name:
                return npc.name, npc.role
        existing = self.channels.get(npc_name)
        if existing is not None:
            return existing.name, existing.role
        raise UnknownEntityError("npc", npc_name)

    def channel_for(self, npc_name: str | None = None, expert: bool = False) -> ConversationChannel:
        """The channel a chat message would go to."""
        if expert:
            return self.channels.expert
        name, role = self._persona_for(npc_name)
        return self.channels.persona(name, role)

    async def send_message(self, text: str, npc_name: str | None = None, expert: bool = False) -> Message:
        """Send ``text`` to an NPC (the active one by default) or the historian.

        Returns:
            The reply message, already appended to the channel.
        """
        text = text.strip()
        if not text:
            raise ValueError("Message must not be empty")
        era = self._require_era()
        channel = self.channel_for(npc_name, expert)

        async with self._chat_locks[f"{channel.kind}:{channel.name}"]:
            state = self.state
            context = VIDEO_CONTEXT if state.active_video_uri else ""

            if expert:
                agent = self.historian_chat
                system = agent.system_prompt(era, state.current_location, context)
            else:
                agent = self.npc_chat
                system = agent.system_prompt(
                    era, channel.name, channel.role, state.simulation.role, context,
                )

            channel.append_user_turn(text)
            history = channel.to_api_history(exclude_last=True)
            reply = await agent.reply(history, text, system)
            return channel.append_reply(reply)

    async def select_npc(self, npc_id: str) -> GameState:
        """Make a nearby character the active conversation partner."""
        npc = self._find_npc(npc_id)
        self.channels.persona(npc.name, npc.role)
        return await self.store.apply(ActiveNpcSelected(npc.name, npc.role))

    # =========================================================================
    # Custom events, divergence, lens
    # =========================================================================

    async def request_custom_event(self, query: str) -> list[HistoricalEvent]:
        """Look up one real event for ``query`` and append it to the list."""
        query = query.strip()
        if not query:
            raise ValueError("Query must not be empty")
        era = self._require_era()

        async with self._text_request("custom event"):
            snapshot = await self.store.apply(SceneLoading())
            events = await self.chronicler.custom_event(era, snapshot.current_location, query)
            await self.store.apply(CustomEventsAdded(events))
            if not events:
                await self.store.apply(NoticePosted(NO_RECORD_NOTICE))
        return events

    async def diverge(self, intervention: str) -> DivergenceResult | None:
        """Apply a butterfly-effect intervention to the current scene."""
        intervention = intervention.strip()
        if not intervention:
            raise ValueError("Intervention must not be empty")
        era = self._require_era()

        async with self._text_request("divergence"):
            snapshot = await self.store.apply(SceneLoading())
            result = await self.divergence.diverge(
                era, intervention, snapshot.current_description, snapshot.simulation,
            )
            if result is None:
                await self.store.apply(SceneLoading(loading=False))
                await self.store.apply(NoticePosted(DIVERGENCE_FAILED_NOTICE))
                return None
            state = await self.store.apply(DivergenceApplied(result))

        self._schedule_scene_image(state)
        return result

    async def toggle_confidence(self, visible: bool | None = None) -> GameState:
        return await self.store.apply(ConfidenceLayerToggled(visible))

    async def close_video(self) -> GameState:
        return await self.store.apply(VideoPlaybackChanged(None))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """Cancel media work and stop the store."""
        await self._cancel_media()
        await self.store.stop()
        logger.info(f"[{self.session_id}] closed")
