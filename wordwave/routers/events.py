from __future__ import annotations
import logging

from ..managers.game import GameManager

logger = logging.getLogger(__name__)


def register_socket_handlers(sio, games: GameManager):
    @sio.event
    async def connect(sid, environ, auth=None):
        await sio.emit('pong', to=sid)

    @sio.event
    async def disconnect(sid):
        games.remove(sid)

    @sio.on('ping')
    async def on_ping(sid):
        await sio.emit('pong', to=sid)

    @sio.on('game:start')
    async def game_start(sid, *args):
        await games.start_game(sid)

    @sio.on('game:submit')
    async def game_submit(sid, payload):
        word = payload.get('word') if isinstance(payload, dict) else payload
        if not isinstance(word, str):
            return
        await games.submit_word(sid, word)

    @sio.on('game:submitScore')
    async def game_submit_score(sid, payload):
        if not isinstance(payload, dict):
            return
        await games.submit_score(sid, payload.get('name') or '', payload.get('email'))

    @sio.on('game:state')
    async def game_state(sid, *args):
        games.get_or_create(sid)
        await games.emit_state(sid)
