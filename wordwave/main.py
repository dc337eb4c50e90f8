from __future__ import annotations
import asyncio
import logging
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .chain import GameRules
from .config import Config
from .dictionary import DictionaryService
from .managers.game import GameManager
from .routers import leaderboard, words
from .routers.events import register_socket_handlers
from .session import SessionSettings
from .sources import RandomWordSource, RelatedWordSource
from .store import LeaderboardStore, WordOfDayStore, init_db, make_engine
from .word_of_day import RolloverWatcher, WordOfDayProvider, utcnow

logger = logging.getLogger(__name__)

ROLLOVER_INTERVAL = 1.0  # seconds


async def watch_rollover(sio, watcher: RolloverWatcher, interval: float = ROLLOVER_INTERVAL):
    """Push the countdown every second and the new word once the UTC day changes."""
    while True:
        try:
            await asyncio.sleep(interval)
            if watcher.tick():
                record = await asyncio.to_thread(watcher.provider.get)
                await sio.emit('word-of-day:changed', record.model_dump())
            await sio.emit('word-of-day:countdown', watcher.countdown().model_dump())
        except asyncio.CancelledError:
            return
        except Exception:
            logger.exception("Word of the day broadcast failed")


def create_app(config_class=Config,
               dictionary: DictionaryService = None,
               random_source: RandomWordSource = None,
               related_source: RelatedWordSource = None,
               clock=utcnow):
    logging.basicConfig(level=config_class.LOG_LEVEL)

    engine = make_engine(config_class.DATABASE_URL)
    dictionary = dictionary or DictionaryService(timeout=config_class.DICTIONARY_TIMEOUT_SEC,
                                                 cache_size=config_class.DICTIONARY_CACHE_SIZE)
    provider = WordOfDayProvider(
        dictionary=dictionary,
        random_source=random_source or RandomWordSource(timeout=config_class.SOURCE_TIMEOUT_SEC),
        related_source=related_source or RelatedWordSource(timeout=config_class.SOURCE_TIMEOUT_SEC),
        store=WordOfDayStore(engine),
        clock=clock,
        max_attempts=config_class.MAX_WORD_ATTEMPTS,
        fallback_words=config_class.FALLBACK_WORDS,
    )
    leaderboard_store = LeaderboardStore(engine, limit=config_class.LEADERBOARD_LIMIT)
    rollover = RolloverWatcher(provider)

    # Socket.IO server (ASGI)
    sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins=config_class.CORS_ORIGINS)
    games = GameManager(
        sio, provider, leaderboard_store,
        rules=GameRules.from_config(config_class),
        settings=SessionSettings.from_config(config_class),
        dictionary=dictionary if config_class.CHECK_DICTIONARY else None,
    )
    register_socket_handlers(sio, games)

    @asynccontextmanager
    async def lifespan(app):
        init_db(engine)
        task = asyncio.create_task(watch_rollover(sio, rollover))
        logger.info("Wordwave server started, word of the day for %s", rollover.current)
        try:
            yield
        finally:
            task.cancel()
            for sid in list(games.sessions):
                games.remove(sid)
            logger.info("Stop Server")

    app = FastAPI(title="Wordwave Server", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config_class.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    app.include_router(words.router)
    app.include_router(leaderboard.router)

    app.state.config = config_class
    app.state.engine = engine
    app.state.dictionary = dictionary
    app.state.provider = provider
    app.state.leaderboard = leaderboard_store
    app.state.rollover = rollover
    app.state.sio = sio
    app.state.games = games
    return app


app = create_app()

# Mount Socket.IO ASGI application
application = socketio.ASGIApp(app.state.sio, other_asgi_app=app)

# For local running: uvicorn wordwave.main:application --reload --host 0.0.0.0 --port 8000
