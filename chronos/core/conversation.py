"""
Conversation channels.

A channel is the ordered, append-only message history with one
interlocutor: an in-world NPC (persona channel) or the out-of-world
historian (expert channel). Messages carry display fields (id, timestamp)
that the chat endpoint does not understand, so ``to_api_history`` converts
them into the gateway's turn format right before a call.
"""

import time
import uuid

from ..enums import ChannelKind, Sender
from ..llm import ChatHistory
from .models import Message

EXPERT_KEY = "__expert__"


class ConversationChannel:
    """Ordered message history for one interlocutor."""

    def __init__(self, kind: ChannelKind, name: str, role: str = "", clock=time.time):
        self.kind = kind
        self.name = name
        self.role = role
        self._clock = clock
        self._messages: list[Message] = []

    def __len__(self) -> int:
        return len(self._messages)

    def _append(self, sender: Sender, text: str) -> Message:
        now = self._clock()
        # Wall clocks can step backwards; keep the channel ordered anyway
        if self._messages and now < self._messages[-1].timestamp:
            now = self._messages[-1].timestamp
        message = Message(id=uuid.uuid4().hex, sender=sender, text=text, timestamp=now)
        self._messages.append(message)
        return message

    def append_user_turn(self, text: str) -> Message:
        return self._append(Sender.USER, text)

    def append_reply(self, text: str) -> Message:
        return self._append(Sender.NPC, text)

    def history(self) -> list[Message]:
        """Copy of the messages, oldest first."""
        return list(self._messages)

    def to_api_history(self, exclude_last: bool = False) -> ChatHistory:
        """Messages as ``[{"role": "user"|"model", "parts": [{"text": ...}]}]``.

        Args:
            exclude_last: Drop the newest message (the one about to be sent)
        """
        messages = self._messages[:-1] if exclude_last else self._messages
        return [
            {
                "role": "user" if m.sender == Sender.USER else "model",
                "parts": [{"text": m.text}],
            }
            for m in messages
        ]


class ChannelRegistry:
    """All channels of a session: one per NPC name plus the expert channel."""

    def __init__(self, expert_name: str, expert_role: str, clock=time.time):
        self._clock = clock
        self._expert_name = expert_name
        self._expert_role = expert_role
        self._expert = self._open_expert()
        self._personas: dict[str, ConversationChannel] = {}

    def _open_expert(self) -> ConversationChannel:
        return ConversationChannel(
            ChannelKind.EXPERT, self._expert_name, self._expert_role, clock=self._clock,
        )

    @property
    def expert(self) -> ConversationChannel:
        return self._expert

    def persona(self, name: str, role: str = "") -> ConversationChannel:
        """Get or open the channel for NPC ``name``. Switching never clears history."""
        channel = self._personas.get(name)
        if channel is None:
            channel = ConversationChannel(ChannelKind.PERSONA, name, role, clock=self._clock)
            self._personas[name] = channel
        elif role and not channel.role:
            channel.role = role
        return channel

    def get(self, key: str) -> ConversationChannel | None:
        if key == EXPERT_KEY:
            return self._expert
        return self._personas.get(key)

    def snapshot(self) -> dict[str, list[Message]]:
        """All histories keyed by NPC name (expert under EXPERT_KEY)."""
        data = {name: channel.history() for name, channel in self._personas.items()}
        data[EXPERT_KEY] = self._expert.history()
        return data

    def clear(self) -> None:
        """Era change: drop every conversation.

        Channels are replaced rather than emptied, so a turn still in flight
        from the previous era lands on a channel nobody reads any more.
        """
        self._personas = {}
        self._expert = self._open_expert()
