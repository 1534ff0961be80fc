"""Tests for the simulation merge and the GameState reducer."""

import pytest

from chronos.agents.navigator import SceneNavigator, fallback_navigation
from chronos.core.events import (
    ActiveNpcSelected,
    ConfidenceLayerToggled,
    CustomEventsAdded,
    DivergenceApplied,
    EraStarted,
    EventVideoResolved,
    NavigationApplied,
    NoticePosted,
    SceneImageResolved,
    SceneLoading,
    VideoGenerationStarted,
    VideoPlaybackChanged,
)
from chronos.core.models import (
    DivergenceResult,
    GameState,
    HistoricalEvent,
    SimulationState,
    SimulationUpdate,
)
from chronos.core.reducer import clamp_health, merge, reduce
from factories import navigation_output


def _sim(**overrides) -> SimulationState:
    data = dict(is_active=True, role="Scribe", objective="Copy the edict", time_of_day="Dawn",
                gold=10, health=100, inventory=["Stylus"])
    data.update(overrides)
    return SimulationState(**data)


def _update(gold=0, health=0, time="Noon", text="Done.") -> SimulationUpdate:
    return SimulationUpdate(gold_change=gold, health_change=health, time_of_day=time, action_result_text=text)


def _navigated(**kwargs) -> GameState:
    state = reduce(GameState(), EraStarted(era="Ancient Rome (100 AD)", simulation=_sim()))
    result = SceneNavigator.to_result(navigation_output(**kwargs), now_ms=1000)
    return reduce(state, NavigationApplied(result))


# ---------------------------------------------------------------------------
# merge
# ---------------------------------------------------------------------------

class TestMerge:
    def test_gold_is_additive_over_any_sequence(self):
        deltas = [5, -3, 0, 12, -40, 7]
        sim = _sim(gold=10)
        for d in deltas:
            sim = merge(sim, _update(gold=d))
        assert sim.gold == 10 + sum(deltas)

    def test_gold_may_go_negative(self):
        assert merge(_sim(gold=2), _update(gold=-5)).gold == -3

    def test_health_clamped_high(self):
        assert merge(_sim(health=95), _update(health=30)).health == 100

    def test_health_clamped_low(self):
        assert merge(_sim(health=10), _update(health=-50)).health == 0

    def test_replaces_time_and_result(self):
        sim = merge(_sim(), _update(time="Dusk", text="You sold a scroll."))
        assert sim.time_of_day == "Dusk"
        assert sim.last_action_result == "You sold a scroll."

    def test_role_objective_inventory_untouched(self):
        before = _sim()
        after = merge(before, _update(gold=1))
        assert (after.role, after.objective, after.inventory) == (before.role, before.objective, before.inventory)

    def test_does_not_mutate_input(self):
        before = _sim(gold=10)
        merge(before, _update(gold=5))
        assert before.gold == 10

    def test_clamp_custom_bounds(self):
        assert clamp_health(150, 0, 120) == 120
        assert clamp_health(-5, 1, 100) == 1


# ---------------------------------------------------------------------------
# reduce
# ---------------------------------------------------------------------------

class TestEraStarted:
    def test_resets_state(self):
        state = _navigated()
        state = reduce(state, EraStarted(era="Victorian London (1880 AD)", simulation=_sim(role="Chimney Sweep")))
        assert state.era == "Victorian London (1880 AD)"
        assert state.simulation.role == "Chimney Sweep"
        assert state.historical_events == []
        assert state.notices == []
        assert state.is_loading_text is True

    def test_bumps_scene_version(self):
        state = GameState(scene_version=4)
        assert reduce(state, EraStarted(era="x", simulation=_sim())).scene_version == 5

    def test_clamps_opening_health(self):
        state = reduce(GameState(), EraStarted(era="x", simulation=_sim(health=400)))
        assert state.simulation.health == 100


class TestNavigationApplied:
    def test_applies_scene(self):
        state = _navigated(location="Subura", npc="Livia", gold_change=3)
        assert state.current_location == "Subura"
        assert state.active_npc_name == "Livia"
        assert state.simulation.gold == 13
        assert state.is_loading_text is False
        assert state.is_loading_image is True
        assert len(state.historical_events) == 2

    def test_notices_action_result_and_arrival(self):
        state = _navigated(npc="Livia", action_result="You buy figs.")
        assert "[SYSTEM] You buy figs." in state.notices
        assert "*You see Livia (Baker) nearby.*" in state.notices

    def test_no_arrival_notice_for_same_npc(self):
        state = _navigated(npc="Livia")
        result = SceneNavigator.to_result(navigation_output(npc="Livia"), now_ms=2000)
        before = len(state.notices)
        state = reduce(state, NavigationApplied(result))
        assert len(state.notices) == before + 1  # only the [SYSTEM] line

    def test_events_replaced_wholesale(self):
        state = _navigated(events=2)
        result = fallback_navigation(state.current_location, state.simulation)
        state = reduce(state, NavigationApplied(result))
        assert state.historical_events == []
        assert state.confidence.speculative == ["Everything"]


class TestSceneImage:
    def test_current_version_applied(self):
        state = _navigated()
        state = reduce(state, SceneImageResolved(scene_version=state.scene_version, image_url="data:image/png;base64,AA"))
        assert state.image_url == "data:image/png;base64,AA"
        assert state.is_loading_image is False

    def test_stale_version_discarded(self):
        state = _navigated()
        stale_version = state.scene_version
        result = SceneNavigator.to_result(navigation_output(location="Baths"), now_ms=2000)
        state = reduce(state, NavigationApplied(result))

        after = reduce(state, SceneImageResolved(scene_version=stale_version, image_url="data:old"))
        assert after is state
        assert after.image_url is None
        assert after.is_loading_image is True


class TestVideoEvents:
    def test_event_video_resolved_sets_uri_and_plays(self):
        state = _navigated()
        event_id = state.historical_events[0].id
        state = reduce(state, VideoGenerationStarted(event_id, notice="preparing"))
        assert state.is_generating_video and state.current_video_entity_id == event_id

        state = reduce(state, EventVideoResolved(event_id, "/api/game/media/s/event_video/a.mp4", notice="behold"))
        assert state.historical_events[0].video_uri == "/api/game/media/s/event_video/a.mp4"
        assert state.active_video_uri == "/api/game/media/s/event_video/a.mp4"
        assert state.is_generating_video is False
        assert state.notices[-2:] == ["preparing", "behold"]

    def test_failed_video_only_clears_flag(self):
        state = _navigated()
        event_id = state.historical_events[0].id
        state = reduce(state, VideoGenerationStarted(event_id))
        state = reduce(state, EventVideoResolved(event_id, None, notice="hazy"))
        assert state.historical_events[0].video_uri is None
        assert state.active_video_uri is None
        assert state.is_generating_video is False
        assert state.notices[-1] == "hazy"

    def test_video_for_replaced_event_does_not_play(self):
        state = _navigated()
        state = reduce(state, EventVideoResolved("event-0-99", "/x.mp4"))
        assert state.active_video_uri is None

    def test_playback_changed(self):
        state = reduce(GameState(), VideoPlaybackChanged("/x.mp4"))
        assert state.active_video_uri == "/x.mp4"
        assert reduce(state, VideoPlaybackChanged(None)).active_video_uri is None


class TestMiscEvents:
    def test_scene_loading_stops_playback(self):
        state = GameState(active_video_uri="/x.mp4")
        assert reduce(state, SceneLoading()).active_video_uri == "/x.mp4"
        assert reduce(state, SceneLoading(stop_playback=True)).active_video_uri is None

    def test_custom_events_appended(self):
        state = _navigated(events=2)
        extra = HistoricalEvent(id="event-5-0", title="Fire", date="64 AD", description="d",
                                impact="i", video_prompt="v")
        state = reduce(state, CustomEventsAdded([extra]))
        assert [e.id for e in state.historical_events][-1] == "event-5-0"
        assert len(state.historical_events) == 3

    def test_divergence(self):
        state = _navigated()
        version = state.scene_version
        result = DivergenceResult(intervention="No aqueduct", description="Dry fountains",
                                  consequences=["Thirst"], simulation_update=_update(gold=-2, health=-200))
        state = reduce(state, DivergenceApplied(result))
        assert state.current_description == "Dry fountains"
        assert state.simulation.gold == 8
        assert state.simulation.health == 0
        assert state.scene_version == version + 1
        assert state.divergence == result

    def test_confidence_toggle(self):
        state = reduce(GameState(), ConfidenceLayerToggled())
        assert state.show_confidence_layer is True
        assert reduce(state, ConfidenceLayerToggled()).show_confidence_layer is False
        assert reduce(state, ConfidenceLayerToggled(visible=True)).show_confidence_layer is True

    def test_active_npc_selected(self):
        state = reduce(GameState(), ActiveNpcSelected("Livia", "Vestal"))
        assert (state.active_npc_name, state.active_npc_role) == ("Livia", "Vestal")

    def test_notice_posted(self):
        assert reduce(GameState(), NoticePosted("hello")).notices == ["hello"]

    def test_unknown_event_rejected(self):
        with pytest.raises(TypeError):
            reduce(GameState(), object())

    def test_reduce_is_pure(self):
        state = GameState()
        reduce(state, NoticePosted("hello"))
        assert state.notices == []
