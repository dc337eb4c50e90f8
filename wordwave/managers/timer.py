from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from ..schemas import TimerState
from ..session import PLAYING, GameSession

logger = logging.getLogger(__name__)

TICK_INTERVAL = 1.0  # seconds

EventHandler = Callable[[str, str], Awaitable[None]]


class TimerManager:
    """Drives ``GameSession.tick`` once per second for every playing session."""

    def __init__(self, sio, interval: float = TICK_INTERVAL):
        self.sio = sio
        self.interval = interval
        self._sessions: Dict[str, GameSession] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def start(self, sid: str, session: GameSession, on_event: Optional[EventHandler] = None) -> asyncio.Task:
        self.cancel(sid)
        self._sessions[sid] = session
        task = asyncio.create_task(self._run(sid, session, on_event))
        self._tasks[sid] = task
        return task

    def cancel(self, sid: str):
        task = self._tasks.pop(sid, None)
        if task and not task.done():
            task.cancel()
        self._sessions.pop(sid, None)

    def is_running(self, sid: str) -> bool:
        task = self._tasks.get(sid)
        return bool(task and not task.done())

    def get_state(self, sid: str) -> Optional[TimerState]:
        session = self._sessions.get(sid)
        if not session:
            return None
        return TimerState(timeLeft=session.time_left, duration=session.settings.duration,
                          isRunning=self.is_running(sid))

    async def _run(self, sid: str, session: GameSession, on_event: Optional[EventHandler]):
        try:
            while session.state == PLAYING:
                await asyncio.sleep(self.interval)
                events = session.tick()
                await self.sio.emit('timer-sync', self.get_state(sid).model_dump(), to=sid)
                if on_event:
                    for event in events:
                        await on_event(sid, event)
        except asyncio.CancelledError:
            return
        finally:
            if self._tasks.get(sid) is asyncio.current_task():
                self._tasks.pop(sid, None)
