"""Prompt text for every image and video the engine requests."""

from ..core.models import Atmosphere, LocalNPC, MapLocation


def scene_image_prompt(era: str, description: str, atmosphere: Atmosphere) -> str:
    """First-person still of the current scene."""
    return f"""First-person view, photorealistic, cinematic lighting, 8k resolution.
Historical reconstruction of {era}.
Scene: {description}
Atmosphere: {atmosphere.weather}, {atmosphere.lighting}.
Details: {atmosphere.sound} (visualized as busy activity if applicable).
No text overlays."""


def reconstruction_video_prompt(prompt: str) -> str:
    """Wrap a model-authored event prompt for Veo."""
    return f"Historical reconstruction footage: {prompt}. Cinematic, photorealistic, 4k."


def npc_life_video_prompt(era: str, npc: LocalNPC) -> str:
    return reconstruction_video_prompt(
        f"{npc.video_prompt}. A day in the life of {npc.name}, a {npc.role} in {era}, "
        f"currently {npc.activity}"
    )


def location_panorama_prompt(era: str, location: MapLocation) -> str:
    """Wide establishing shot for a map pin."""
    return f"""Wide panoramic establishing shot, photorealistic, eye level, 8k resolution.
Historical reconstruction of {location.name} in {era}.
{location.visual_prompt}
{location.description}
Period-accurate architecture, people and clothing. No text overlays."""


def time_lapse_prompt(era: str, subject: str) -> str:
    """Bird's-eye time-lapse of ``subject`` across the era."""
    return (
        f"Bird's-eye view time-lapse of {subject} in {era}. Years compress into seconds: "
        f"construction, crowds, seasons and light change rapidly. "
        f"Cinematic, photorealistic, 4k."
    )
