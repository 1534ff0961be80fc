"""Chat agents - in-world NPC personas and the out-of-world historian.

Unlike the structured agents these return free text. A failed call never
raises; the persona answers with an in-character excuse instead.
"""

import logging

from ..gateway import AIGateway, get_gateway
from ..llm import ChatHistory
from ..llm.errors import GatewayError

logger = logging.getLogger(__name__)

VIDEO_CONTEXT = (
    "The user is currently watching a historical reconstruction video. "
    "Explain what is happening in the video."
)

EXPERT_NAME = "The Historian"
EXPERT_ROLE = "Academic Historian"


class ChatAgent:
    """One chat turn against a resupplied history."""

    agent_name: str = "chat"
    fallback_reply: str = "..."

    def __init__(self, gateway: AIGateway | None = None):
        self._gateway = gateway

    @property
    def gateway(self) -> AIGateway:
        return self._gateway or get_gateway()

    async def reply(self, history: ChatHistory, message: str, system_prompt: str) -> str:
        """The persona's answer to ``message``; ``fallback_reply`` on failure."""
        try:
            return await self.gateway.chat(history, system_prompt, message)
        except GatewayError as e:
            logger.warning(f"[{self.agent_name}] chat failed: {e}")
            return self.fallback_reply


class NpcChatAgent(ChatAgent):
    """Roleplay as the NPC the player is talking to."""

    agent_name = "npc_chat"
    fallback_reply = "I cannot understand you."

    def system_prompt(
        self,
        era: str,
        npc_name: str,
        npc_role: str,
        player_role: str,
        context: str = "",
    ) -> str:
        return f"""You are {npc_name}, a {npc_role} living in {era}.
The user is a {player_role}. Address them as such.

RULES:
1. You ONLY know things from {era}. Do not know about modern tech or future events.
2. You have your own daily struggles and biases.
3. If the user is a lower class than you, be haughty. If higher, be respectful.
4. Keep responses concise (under 50 words).

CONTEXT: {context}"""


class HistorianChatAgent(ChatAgent):
    """Answer as a modern historian standing outside the simulation."""

    agent_name = "historian_chat"
    fallback_reply = "The archives are silent on that matter."

    def system_prompt(self, era: str, location: str = "", context: str = "") -> str:
        return f"""You are {EXPERT_NAME}, an {EXPERT_ROLE.lower()} specialising in {era}.
The user is exploring a reconstruction of {era}{f', currently at {location}' if location else ''}.

RULES:
1. Speak from the present day, with full hindsight.
2. Distinguish what the evidence proves from what scholars infer or guess.
3. Cite the kind of source (excavation, chronicle, inscription) when you can.
4. Keep responses concise (under 80 words).

CONTEXT: {context}"""
