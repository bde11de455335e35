"""
Session Manager - the application root.

Owns the authoritative in-memory state (profile, progress, chat sessions and
the current-session pointer) and keeps it in step with the local store and
the conversation adapter. Every mutation is applied in memory first and then
persisted; persistence failures are surfaced, never rolled back.
"""

import asyncio
import logging
import random
from contextlib import aclosing
from datetime import date
from functools import partial
from typing import Any, Callable, Coroutine, List, Optional, Set

from ..agents import ConversationAdapter, ConversationHandle, build_greeting
from ..llm.base import ConversationConnectionError, ConversationError
from ..models import (
    AppView, ChatMessage, ChatSession, DEFAULT_SESSION_TITLE, ProgressEntry,
    UserProfile, new_id, upsert_entry
)
from ..storage import LocalStore, StorageError
from .logging_config import SessionLoggerAdapter, truncate_large_data
from .progress import build_progress_entry, mock_initial_history

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 30
APOLOGY_TEXT = (
    "Sorry, I'm having trouble connecting right now. "
    "Please check your internet or API key."
)

Listener = Callable[["SessionManager"], Any]


def derive_title(title: str, messages: List[ChatMessage]) -> str:
    """
    Title for a session after its messages changed.

    Only a session still carrying the default title, holding more than one
    message and at least one user message gets a new title: the first user
    message cut to 30 characters, with "..." when cut.
    """
    if title != DEFAULT_SESSION_TITLE or len(messages) <= 1:
        return title
    first_user = next((m for m in messages if m.role == 'user'), None)
    if first_user is None:
        return title
    text = first_user.text
    if len(text) > TITLE_MAX_LENGTH:
        return text[:TITLE_MAX_LENGTH] + '...'
    return text


class SessionManager:
    """
    Mediates between view intents, the local store and the conversation adapter.

    Listeners registered with :meth:`subscribe` are called after every state
    change so a view can re-render.
    """

    def __init__(self, store: LocalStore, adapter: ConversationAdapter,
                 rng: Optional[random.Random] = None):
        """
        Initialize the manager.

        Args:
            store: Local store holding auth, profile, progress and sessions
            adapter: Conversation adapter used for coach replies
            rng: Optional random source for seeded onboarding history
        """
        self.store = store
        self.adapter = adapter
        self._rng = rng

        self.view: AppView = AppView.LOGIN
        self.is_loading = False
        self.is_authenticated = False
        self.user_email = ""

        self.profile: Optional[UserProfile] = None
        self.progress: List[ProgressEntry] = []
        self.sessions: List[ChatSession] = []
        self.current_session_id: Optional[str] = None
        self.conversation: Optional[ConversationHandle] = None

        self.background_errors: List[BaseException] = []
        self._streaming: Set[str] = set()
        self._pending_writes: Set[asyncio.Task] = set()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state-change listener; returns a function that removes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def get_session(self, session_id: Optional[str]) -> Optional[ChatSession]:
        return next((s for s in self.sessions if s.id == session_id), None)

    @property
    def active_session(self) -> Optional[ChatSession]:
        """Session the current pointer resolves to, or None."""
        return self.get_session(self.current_session_id)

    @property
    def latest_stats(self) -> Optional[ProgressEntry]:
        return self.progress[-1] if self.progress else None

    def is_streaming(self, session_id: str) -> bool:
        return session_id in self._streaming

    def show(self, view: AppView) -> None:
        self.view = view
        self._notify()

    # ------------------------------------------------------------------
    # Startup, auth and onboarding
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Restore the previous state from the store and pick the first screen."""
        self.is_loading = True
        self._notify()
        try:
            email = await self.store.auth.get_session()
            if not email:
                self.view = AppView.LOGIN
                return

            self.is_authenticated = True
            self.user_email = email

            profile, progress, sessions = await asyncio.gather(
                self.store.profile.get(),
                self.store.progress.get_all(),
                self.store.sessions.get_all(),
            )
            self.sessions = sessions

            if profile is None:
                self.view = AppView.ONBOARDING
                return

            self.profile = profile
            self.progress = progress
            if sessions:
                self.view = AppView.DASHBOARD
            else:
                await self.create_session()
                await self.open_chat()
            logger.info(f"Restored state: {len(sessions)} sessions, {len(progress)} progress entries")
        except StorageError:
            logger.error("Failed to initialize app", exc_info=True)
        finally:
            self.is_loading = False
            self._notify()

    async def login(self, email: str) -> None:
        """Sign in and load the user's data."""
        self.is_loading = True
        self._notify()
        try:
            await self.store.auth.sign_in(email)
            self.is_authenticated = True
            self.user_email = email

            profile = await self.store.profile.get()
            if profile is None:
                self.view = AppView.ONBOARDING
                return

            self.profile = profile
            self.progress = await self.store.progress.get_all()
            self.sessions = await self.store.sessions.get_all()
            self.view = AppView.DASHBOARD
        finally:
            self.is_loading = False
            self._notify()

    async def logout(self) -> None:
        """Sign out and drop all in-memory state."""
        await self.store.auth.sign_out()
        self.is_authenticated = False
        self.user_email = ""
        self.profile = None
        self.progress = []
        self.sessions = []
        self.current_session_id = None
        self.conversation = None
        self._streaming.clear()
        self.background_errors = []
        self.view = AppView.LOGIN
        self._notify()

    async def complete_onboarding(self, profile: UserProfile, today: Optional[date] = None) -> str:
        """
        Save the profile, seed a week of progress and open a first chat.

        Returns:
            str: Id of the new chat session
        """
        self.is_loading = True
        self._notify()
        try:
            await self.store.profile.upsert(profile)
            self.profile = profile

            initial_progress = mock_initial_history(profile.weight, today=today, rng=self._rng)
            await self.store.progress.set_initial_history(initial_progress)
            self.progress = initial_progress

            session_id = await self.create_session()
            await self.open_chat()
            logger.info(f"Onboarding completed for {profile.name} (goal={profile.goal})")
            return session_id
        finally:
            self.is_loading = False
            self._notify()

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    async def add_progress(self, entry: ProgressEntry) -> List[ProgressEntry]:
        """Upsert ``entry`` by date in memory, then persist it."""
        self.progress = upsert_entry(self.progress, entry)
        self._notify()
        await self.store.progress.upsert(entry)
        return self.progress

    async def log_progress(
        self,
        weight_input: str,
        calories_input: str,
        workout_done: bool,
        today: Optional[date] = None
    ) -> ProgressEntry:
        """Record today's entry from raw form input, keeping the last good weight on bad input."""
        if self.latest_stats is not None and self.latest_stats.weight:
            current_weight = self.latest_stats.weight
        else:
            current_weight = self.profile.weight if self.profile else 0.0

        entry = build_progress_entry(
            weight_input, calories_input, workout_done, current_weight, today=today
        )
        await self.add_progress(entry)
        return entry

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def create_session(self) -> str:
        """
        Start an empty session and make it current.

        The session is visible in memory before the write resolves.
        """
        session = ChatSession(id=new_id())
        self.sessions.append(session)
        self.select_session(session.id)
        await self.store.sessions.create(session)
        logger.debug(f"Created session {session.id}")
        return session.id

    def select_session(self, session_id: Optional[str]) -> None:
        """
        Point at ``session_id`` without checking that it exists.

        A dangling id simply resolves to no active session.
        """
        if session_id != self.current_session_id:
            self.current_session_id = session_id
            self.conversation = None
        self._notify()

    async def delete_session(self, session_id: str) -> None:
        """Remove a session now; the store delete runs in the background."""
        self.sessions = [s for s in self.sessions if s.id != session_id]
        if self.current_session_id == session_id:
            self.current_session_id = None
            self.conversation = None
        self._notify()
        self._schedule_write(self.store.sessions.delete(session_id), f"delete session {session_id}")

    def _schedule_write(self, coro: Coroutine, description: str) -> None:
        task = asyncio.create_task(coro)
        self._pending_writes.add(task)
        task.add_done_callback(partial(self._on_write_done, description))

    def _on_write_done(self, description: str, task: asyncio.Task) -> None:
        self._pending_writes.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background write failed: {description}", exc_info=error)
            self.background_errors.append(error)
            self._notify()

    async def wait_for_pending_writes(self) -> None:
        """Wait until every background write has finished (successfully or not)."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    async def open_chat(self) -> Optional[ConversationHandle]:
        """
        Show the chat for the current session.

        A session without messages first gets a locally generated greeting.
        Then a conversation handle is opened; if the service is not configured
        the handle stays unset and the next send answers with an apology.
        """
        self.view = AppView.CHAT
        session = self.active_session
        if session is None or self.profile is None:
            self._notify()
            return None

        if not session.messages:
            session.messages.append(ChatMessage(role='model', text=build_greeting(self.profile)))
            self._notify()
            await self.store.sessions.update(session.id, messages=session.messages, title=session.title)

        self.conversation = self._open_conversation(session)
        self._notify()
        return self.conversation

    def _open_conversation(self, session: ChatSession) -> Optional[ConversationHandle]:
        try:
            return self.adapter.open_session(
                session.id, self.profile, session.messages, self.latest_stats
            )
        except ConversationConnectionError as e:
            logger.warning(f"Could not open conversation for session {session.id}: {e}")
            return None

    async def append_user_message(self, session_id: str, text: str) -> ChatMessage:
        """
        Append a user message, derive the title if due, and persist both.

        Raises:
            KeyError: If the session does not exist
        """
        session = self.get_session(session_id)
        if session is None:
            raise KeyError(f"Unknown session: {session_id}")

        message = ChatMessage(role='user', text=text)
        session.messages.append(message)
        session.title = derive_title(session.title, session.messages)
        self._notify()

        await self.store.sessions.update(session_id, messages=session.messages, title=session.title)
        return message

    async def stream_model_reply(
        self,
        session_id: str,
        handle: ConversationHandle,
        text: str
    ) -> Optional[ChatMessage]:
        """
        Stream the coach's reply into a placeholder message.

        Fragments are appended in place and the session is written once, when
        the stream ends. A failed stream leaves the apology text instead. If the
        user switches away from ``session_id`` mid-stream the stream is
        abandoned, the placeholder is dropped and None is returned.

        Raises:
            KeyError: If the session does not exist
        """
        session = self.get_session(session_id)
        if session is None:
            raise KeyError(f"Unknown session: {session_id}")

        log = SessionLoggerAdapter(logger, {"session_id": session_id})
        placeholder = ChatMessage(role='model', text='')
        session.messages.append(placeholder)
        self._streaming.add(session_id)
        self._notify()

        abandoned = False
        try:
            async with aclosing(self.adapter.send(handle, text)) as fragments:
                async for fragment in fragments:
                    if self.current_session_id != session_id:
                        abandoned = True
                        break
                    placeholder.text += fragment
                    self._notify()
        except ConversationError as e:
            if self.current_session_id != session_id:
                abandoned = True
            else:
                log.warning(f"Reply failed ({type(e).__name__}): {e}")
                placeholder.text = APOLOGY_TEXT
        finally:
            self._streaming.discard(session_id)

        if abandoned:
            if placeholder in session.messages:
                session.messages.remove(placeholder)
            log.info("Reply abandoned after session switch")
            self._notify()
            return None

        self._notify()
        await self.store.sessions.update(session_id, messages=session.messages)
        log.debug(f"Reply stored ({len(placeholder.text)} chars)")
        return placeholder

    async def send_message(self, text: str) -> Optional[ChatMessage]:
        """
        Send ``text`` in the current session and stream the reply.

        Blank input, no active session, or a reply still streaming in this
        session make this a no-op returning None.
        """
        session = self.active_session
        if session is None or not text.strip():
            return None
        if self.is_streaming(session.id):
            logger.warning(f"Ignoring message for session {session.id}: reply still streaming")
            return None

        logger.debug(f"Sending in session {session.id}: {truncate_large_data(text)}")

        handle = self.conversation
        if handle is None or handle.session_id != session.id:
            # Open before appending so the handle history excludes the new turn
            handle = self._open_conversation(session)
            self.conversation = handle

        await self.append_user_message(session.id, text)

        if handle is None:
            apology = ChatMessage(role='model', text=APOLOGY_TEXT)
            session.messages.append(apology)
            self._notify()
            await self.store.sessions.update(session.id, messages=session.messages)
            return apology

        return await self.stream_model_reply(session.id, handle, text)
