from __future__ import annotations
import asyncio
import logging
from typing import Dict, Optional

from ..chain import DEFAULT_RULES, GameRules
from ..errors import PersistenceFailure, SessionError, ValidationRejection
from ..session import EVENT_DEFINITION_HINT, EVENT_FINISHED, EVENT_LETTER_HINT, GameSession, SessionSettings
from ..word_of_day import WordOfDayProvider
from .timer import TimerManager

logger = logging.getLogger(__name__)


class GameManager:
    """Per-connection game sessions, keyed by Socket.IO sid."""

    def __init__(self, sio, provider: WordOfDayProvider, leaderboard,
                 rules: GameRules = DEFAULT_RULES,
                 settings: SessionSettings = SessionSettings(),
                 dictionary=None,
                 timer: Optional[TimerManager] = None):
        self.sio = sio
        self.provider = provider
        self.leaderboard = leaderboard
        self.rules = rules
        self.settings = settings
        self.dictionary = dictionary
        self.timer = timer or TimerManager(sio)
        self.sessions: Dict[str, GameSession] = {}

    def get_or_create(self, sid: str) -> GameSession:
        if sid not in self.sessions:
            self.sessions[sid] = GameSession(self.rules, self.settings, self.dictionary)
        return self.sessions[sid]

    async def emit_state(self, sid: str):
        session = self.sessions.get(sid)
        if not session:
            return
        await self.sio.emit('game:state', session.snapshot().model_dump(), to=sid)

    async def notify(self, sid: str, kind: str, text: str):
        await self.sio.emit('game:notification', {'type': kind, 'message': text}, to=sid)

    async def start_game(self, sid: str):
        session = self.get_or_create(sid)
        self.timer.cancel(sid)
        record = await asyncio.to_thread(self.provider.get)
        bonus_definition = await asyncio.to_thread(self.provider.definition, record.bonusWord)
        # The client may have disconnected while the word was being fetched
        if self.sessions.get(sid) is not session:
            logger.info("Session %s went away before the game started", sid)
            return
        try:
            session.start(record, bonus_definition)
        except SessionError as exc:
            await self.notify(sid, 'error', str(exc))
            return
        logger.info("Session %s started with %r", sid, record.word)
        self.timer.start(sid, session, self.on_event)
        await self.emit_state(sid)

    async def submit_word(self, sid: str, word: str):
        session = self.sessions.get(sid)
        if not session:
            return
        had_definition_hint = session.definition_hint is not None
        try:
            entry = await session.submit_async(word)
        except ValidationRejection as exc:
            if self.sessions.get(sid) is not session:
                return
            await self.sio.emit('game:message',
                                {'type': 'error', 'reason': exc.reason.value, 'message': exc.message,
                                 'ttl': self.settings.message_ttl}, to=sid)
            await self.emit_state(sid)
            return
        if entry is None or self.sessions.get(sid) is not session:
            return
        await self.sio.emit('game:message',
                            {'type': 'success', 'message': f"+{entry.score} points!", 'entry': entry.model_dump(),
                             'ttl': self.settings.message_ttl}, to=sid)
        if not had_definition_hint and session.definition_hint is not None:
            await self.on_event(sid, EVENT_DEFINITION_HINT)
        await self.emit_state(sid)

    async def submit_score(self, sid: str, name: str, email: Optional[str] = None):
        session = self.sessions.get(sid)
        if not session:
            return
        try:
            entry = session.score_entry(name, email)
            await asyncio.to_thread(self.leaderboard.save_score, entry)
        except SessionError as exc:
            await self.notify(sid, 'warning', str(exc))
            return
        except PersistenceFailure:
            await self.notify(sid, 'error', 'Failed to submit score. Please try again.')
            return
        await self.notify(sid, 'success', 'Score submitted successfully!')

    async def on_event(self, sid: str, event: str):
        session = self.sessions.get(sid)
        if not session:
            return
        if event == EVENT_LETTER_HINT:
            await self.sio.emit('game:hint', {'kind': 'letter', 'value': session.letter_hint}, to=sid)
        elif event == EVENT_DEFINITION_HINT:
            await self.sio.emit('game:hint', {'kind': 'definition', 'value': session.definition_hint}, to=sid)
        elif event == EVENT_FINISHED:
            # The timer loop stops by itself once the session is no longer playing
            logger.info("Session %s finished with %d points", sid, session.score)
            await self.sio.emit('game:finished',
                                {'score': session.score, 'history': [e.model_dump() for e in session.history]},
                                to=sid)
            await self.emit_state(sid)

    def remove(self, sid: str):
        self.timer.cancel(sid)
        self.sessions.pop(sid, None)
