"""
Conversation Adapter - bridges chat sessions and the streaming LLM provider.
"""

import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import AsyncGenerator, List, Optional

import httpx

from ..llm.base import (
    ConversationConnectionError, ConversationError, LLMMessage, LLMProvider,
    StreamInterrupted
)
from ..models import ChatMessage, ProgressEntry, UserProfile
from .prompts import build_system_instruction

logger = logging.getLogger(__name__)


def to_external_history(messages: List[ChatMessage]) -> List[LLMMessage]:
    """One provider turn per chat message, in order."""
    return [LLMMessage.text(m.role, m.text) for m in messages]


@dataclass
class ConversationHandle:
    """
    A stateful conversation bound to one chat session.

    ``history`` grows by a user and a model turn after every completed send.
    """
    session_id: str
    system_instruction: str
    history: List[LLMMessage] = field(default_factory=list)


class ConversationAdapter:
    """
    Opens conversation handles and streams replies through an LLM provider.
    """

    def __init__(self, llm_provider: Optional[LLMProvider] = None,
                 temperature: float = 0.7):
        """
        Initialize the adapter.

        Args:
            llm_provider: Configured provider, or None when no credential is set
            temperature: Sampling temperature for every reply
        """
        self._llm_provider = llm_provider
        self.temperature = temperature

    @property
    def is_configured(self) -> bool:
        return self._llm_provider is not None

    def open_session(
        self,
        session_id: str,
        profile: UserProfile,
        history: List[ChatMessage],
        latest_stats: Optional[ProgressEntry] = None
    ) -> ConversationHandle:
        """
        Create a handle pre-seeded with the session history.

        No request is made here; the service is first contacted on ``send``.

        Raises:
            ConversationConnectionError: If no provider/credential is configured
        """
        if self._llm_provider is None:
            raise ConversationConnectionError(
                "LLM not configured. Set LLM_API_KEY and LLM_PROVIDER to enable coaching replies."
            )

        handle = ConversationHandle(
            session_id=session_id,
            system_instruction=build_system_instruction(profile, latest_stats),
            history=to_external_history(history),
        )
        logger.debug(f"Opened conversation for session {session_id} with {len(handle.history)} turns")
        return handle

    async def send(self, handle: ConversationHandle, text: str) -> AsyncGenerator[str, None]:
        """
        Stream the reply to ``text``.

        Yields fragments to be concatenated in arrival order. Closing the
        generator early stops reading from the transport.

        Raises:
            ConversationConnectionError: The request failed before any fragment arrived
            StreamInterrupted: The stream broke after at least one fragment

        Every provider failure surfaces as one of these two errors.
        """
        if self._llm_provider is None:
            raise ConversationConnectionError("LLM not configured")

        user_turn = LLMMessage.text("user", text)
        reply = ""
        received = False

        stream = self._llm_provider.chat_completion_stream(
            handle.history + [user_turn],
            system_instruction=handle.system_instruction,
            temperature=self.temperature,
        )
        try:
            async with aclosing(stream) as fragments:
                async for fragment in fragments:
                    received = True
                    reply += fragment
                    yield fragment
        except ConversationError:
            raise
        except httpx.HTTPError as e:
            if received:
                raise StreamInterrupted(f"Stream interrupted: {e}") from e
            raise ConversationConnectionError(f"Conversation service unavailable: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected failure while streaming reply: {e}", exc_info=True)
            if received:
                raise StreamInterrupted(f"Stream failed: {e}") from e
            raise ConversationConnectionError(f"Conversation request failed: {e}") from e

        handle.history.extend([user_turn, LLMMessage.text("model", reply)])
