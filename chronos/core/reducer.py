"""
Simulation state reducer.

``merge`` folds one SimulationUpdate onto a SimulationState.
``reduce`` folds any session event onto a GameState.

Both are pure: they return new models and never touch their inputs.
Numeric deltas from the model are trusted for gold (which may go
negative) but health is clamped into [HEALTH_MIN, HEALTH_MAX].
"""

import logging
from typing import Callable

from ..config import Config
from .events import (
    ActiveNpcSelected,
    ConfidenceLayerToggled,
    CustomEventsAdded,
    DivergenceApplied,
    EraStarted,
    Event,
    EventVideoResolved,
    NavigationApplied,
    NoticePosted,
    NpcVideoResolved,
    SceneImageResolved,
    SceneLoading,
    TimeLapseResolved,
    VideoGenerationStarted,
    VideoPlaybackChanged,
)
from .models import GameState, SimulationState, SimulationUpdate

logger = logging.getLogger(__name__)


def clamp_health(value: int, low: int | None = None, high: int | None = None) -> int:
    low = Config.HEALTH_MIN if low is None else low
    high = Config.HEALTH_MAX if high is None else high
    return max(low, min(high, value))


def merge(previous: SimulationState, update: SimulationUpdate) -> SimulationState:
    """Apply one update: deltas are added, time and result text are replaced.

    Role, objective and inventory are left alone; they only change when a
    new era starts.
    """
    return previous.model_copy(update={
        "gold": previous.gold + update.gold_change,
        "health": clamp_health(previous.health + update.health_change),
        "time_of_day": update.time_of_day,
        "last_action_result": update.action_result_text,
    })


# ── Event handlers ────────────────────────────────────────────────────

def _with_notice(state: GameState, text: str | None) -> list[str]:
    if not text:
        return state.notices
    return [*state.notices, text]


def _scene_loading(state: GameState, event: SceneLoading) -> GameState:
    changes = {"is_loading_text": event.loading}
    if event.stop_playback:
        changes["active_video_uri"] = None
    return state.model_copy(update=changes)


def _era_started(state: GameState, event: EraStarted) -> GameState:
    simulation = event.simulation.model_copy(update={
        "is_active": True,
        "health": clamp_health(event.simulation.health),
    })
    return GameState(
        era=event.era,
        simulation=simulation,
        map_locations=list(event.map_locations),
        perspectives=list(event.perspectives),
        is_loading_text=True,
        scene_version=state.scene_version + 1,
        show_confidence_layer=state.show_confidence_layer,
    )


def _navigation_applied(state: GameState, event: NavigationApplied) -> GameState:
    result = event.result
    update = result.simulation_update

    notices = list(state.notices)
    if update.action_result_text:
        notices.append(f"[SYSTEM] {update.action_result_text}")
    if state.active_npc_name != result.npc_suggestion.name:
        notices.append(f"*You see {result.npc_suggestion.name} ({result.npc_suggestion.role}) nearby.*")

    return state.model_copy(update={
        "current_location": result.new_location,
        "current_description": result.description,
        "atmosphere": result.atmosphere,
        "confidence": result.confidence,
        "active_npc_name": result.npc_suggestion.name,
        "active_npc_role": result.npc_suggestion.role,
        "nearby_characters": list(result.nearby_characters),
        "historical_events": list(result.historical_events),
        "simulation": merge(state.simulation, update),
        "divergence": None,
        "is_loading_text": False,
        "is_loading_image": True,
        "scene_version": state.scene_version + 1,
        "notices": notices,
    })


def _scene_image_resolved(state: GameState, event: SceneImageResolved) -> GameState:
    if event.scene_version != state.scene_version:
        logger.debug(
            f"Discarding stale scene image (v{event.scene_version}, current v{state.scene_version})"
        )
        return state
    return state.model_copy(update={"image_url": event.image_url, "is_loading_image": False})


def _video_generation_started(state: GameState, event: VideoGenerationStarted) -> GameState:
    return state.model_copy(update={
        "is_generating_video": True,
        "current_video_entity_id": event.entity_id,
        "notices": _with_notice(state, event.notice),
    })


def _video_finished(state: GameState, entity_id: str) -> dict:
    """Clear the generating flag if it belongs to ``entity_id``."""
    if state.current_video_entity_id != entity_id:
        return {}
    return {"is_generating_video": False, "current_video_entity_id": None}


def _event_video_resolved(state: GameState, event: EventVideoResolved) -> GameState:
    changes = _video_finished(state, event.event_id)
    on_screen = any(e.id == event.event_id for e in state.historical_events)
    if on_screen and event.video_uri:
        changes["historical_events"] = [
            e.model_copy(update={"video_uri": event.video_uri}) if e.id == event.event_id else e
            for e in state.historical_events
        ]
        changes["active_video_uri"] = event.video_uri
    changes["notices"] = _with_notice(state, event.notice)
    return state.model_copy(update=changes)


def _npc_video_resolved(state: GameState, event: NpcVideoResolved) -> GameState:
    changes = _video_finished(state, event.npc_id)
    on_screen = any(c.id == event.npc_id for c in state.nearby_characters)
    if on_screen and event.video_uri:
        changes["nearby_characters"] = [
            c.model_copy(update={"video_uri": event.video_uri}) if c.id == event.npc_id else c
            for c in state.nearby_characters
        ]
        changes["active_video_uri"] = event.video_uri
    changes["notices"] = _with_notice(state, event.notice)
    return state.model_copy(update=changes)


def _time_lapse_resolved(state: GameState, event: TimeLapseResolved) -> GameState:
    changes = _video_finished(state, f"timelapse:{event.subject}")
    if event.video_uri:
        changes["active_video_uri"] = event.video_uri
    changes["notices"] = _with_notice(state, event.notice)
    return state.model_copy(update=changes)


def _video_playback_changed(state: GameState, event: VideoPlaybackChanged) -> GameState:
    return state.model_copy(update={
        "active_video_uri": event.video_uri,
        "notices": _with_notice(state, event.notice),
    })


def _custom_events_added(state: GameState, event: CustomEventsAdded) -> GameState:
    return state.model_copy(update={
        "historical_events": [*state.historical_events, *event.events],
        "is_loading_text": False,
    })


def _divergence_applied(state: GameState, event: DivergenceApplied) -> GameState:
    result = event.result
    return state.model_copy(update={
        "divergence": result,
        "current_description": result.description,
        "simulation": merge(state.simulation, result.simulation_update),
        "is_loading_text": False,
        "is_loading_image": True,
        "scene_version": state.scene_version + 1,
        "notices": _with_notice(state, f"[DIVERGENCE] {result.intervention}"),
    })


def _confidence_layer_toggled(state: GameState, event: ConfidenceLayerToggled) -> GameState:
    visible = not state.show_confidence_layer if event.visible is None else event.visible
    return state.model_copy(update={"show_confidence_layer": visible})


def _active_npc_selected(state: GameState, event: ActiveNpcSelected) -> GameState:
    return state.model_copy(update={"active_npc_name": event.name, "active_npc_role": event.role})


def _notice_posted(state: GameState, event: NoticePosted) -> GameState:
    return state.model_copy(update={"notices": _with_notice(state, event.text)})


_HANDLERS: dict[type, Callable[[GameState, Event], GameState]] = {
    SceneLoading: _scene_loading,
    EraStarted: _era_started,
    NavigationApplied: _navigation_applied,
    SceneImageResolved: _scene_image_resolved,
    VideoGenerationStarted: _video_generation_started,
    EventVideoResolved: _event_video_resolved,
    NpcVideoResolved: _npc_video_resolved,
    TimeLapseResolved: _time_lapse_resolved,
    VideoPlaybackChanged: _video_playback_changed,
    CustomEventsAdded: _custom_events_added,
    DivergenceApplied: _divergence_applied,
    ConfidenceLayerToggled: _confidence_layer_toggled,
    ActiveNpcSelected: _active_npc_selected,
    NoticePosted: _notice_posted,
}


def reduce(state: GameState, event: Event) -> GameState:
    """Return the state after ``event``.

    Raises:
        TypeError: ``event`` is not a known event type
    """
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unknown event type: {type(event).__name__}")
    return handler(state, event)
