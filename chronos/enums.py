"""
Canonical string enumerations for the Living History Engine.

StrEnum values serialize as plain strings, so they're
drop-in replacements for raw string literals in JSON payloads
and LLM schemas.
"""

from enum import StrEnum


# ── Eras ───────────────────────────────────────────────────────────────

class Era(StrEnum):
    """Preset eras. Any other non-empty string is accepted as a custom era."""
    ANCIENT_ROME = "Ancient Rome (100 AD)"
    TENOCHTITLAN = "Tenochtitlan (1500 AD)"
    VICTORIAN_LONDON = "Victorian London (1880 AD)"
    ANCIENT_EGYPT = "Ancient Egypt, Giza (2500 BC)"
    VIETNAM_WAR = "Vietnam War, Saigon (1968 AD)"


# ── Navigation ─────────────────────────────────────────────────────────

class NavigationAction(StrEnum):
    """Directional actions offered by the navigation pad."""
    MOVE_FORWARD = "move_forward"
    MOVE_BACKWARD = "move_backward"
    LOOK_LEFT = "look_left"
    LOOK_RIGHT = "look_right"
    INSPECT = "inspect"

    @property
    def detail(self) -> str:
        """Action label handed to the model."""
        return _ACTION_DETAILS[self]


_ACTION_DETAILS = {
    NavigationAction.MOVE_FORWARD: "Forward",
    NavigationAction.MOVE_BACKWARD: "Backward",
    NavigationAction.LOOK_LEFT: "Look Left",
    NavigationAction.LOOK_RIGHT: "Look Right",
    NavigationAction.INSPECT: "Inspect Surroundings",
}


# ── Conversation ───────────────────────────────────────────────────────

class Sender(StrEnum):
    """Who wrote a chat message."""
    USER = "user"
    NPC = "npc"


class ChannelKind(StrEnum):
    """Persona (in-world NPC) vs. out-of-world expert conversation."""
    PERSONA = "persona"
    EXPERT = "expert"


# ── World entities ─────────────────────────────────────────────────────

class MapLocationType(StrEnum):
    """Map pin categories."""
    STRATEGIC = "strategic"
    CULTURAL = "cultural"
    CONFLICT = "conflict"


class PerspectiveType(StrEnum):
    """Voices of the era."""
    KEY_FIGURE = "key_figure"
    COMMONER = "commoner"
    EXPERT = "expert"


# ── Media ──────────────────────────────────────────────────────────────

class MediaCategory(StrEnum):
    """Media cache / storage categories. Ids are only unique within one."""
    EVENT_VIDEO = "event_video"
    NPC_VIDEO = "npc_video"
    LOCATION_VISUAL = "location_visual"
    TIME_LAPSE = "time_lapse"
