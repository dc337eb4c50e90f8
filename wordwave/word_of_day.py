"""Daily starting word and bonus word.

A record is looked up in the cache, then in the store, and only on a miss
acquired from the network sources. When the sources are unavailable the word is
picked from a fixed pool by hashing the date, so every instance agrees on the
same word for the same day.
"""
from __future__ import annotations
import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Sequence, Tuple

from .config import DEFAULT_FALLBACK_WORDS
from .dictionary import DEFAULT_DEFINITION, DictionaryService
from .errors import AcquisitionFailure, PersistenceFailure
from .schemas import Countdown, WordOfDayRecord
from .sources import RandomWordSource, RelatedWordSource

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d'
WORD_MIN_LENGTH = 4
WORD_MAX_LENGTH = 8

RELATED_WORDS: Dict[str, Tuple[str, ...]] = {
    'chain': ('link', 'connect', 'metal', 'bind'),
    'start': ('begin', 'launch', 'initiate', 'commence'),
    'plant': ('grow', 'flower', 'garden', 'seed'),
    'table': ('chair', 'desk', 'furniture', 'dining'),
    'house': ('home', 'building', 'residence', 'dwelling'),
    'light': ('bright', 'lamp', 'shine', 'glow'),
    'music': ('song', 'melody', 'rhythm', 'sound'),
    'water': ('liquid', 'ocean', 'river', 'hydrate'),
    'earth': ('planet', 'soil', 'ground', 'nature'),
    'paper': ('document', 'sheet', 'write', 'notebook'),
    'glass': ('window', 'mirror', 'transparent', 'crystal'),
    'dream': ('sleep', 'goal', 'aspiration', 'vision'),
    'color': ('paint', 'hue', 'shade', 'pigment'),
    'ocean': ('sea', 'wave', 'marine', 'water'),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def date_key(now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(DATE_FORMAT)


def seconds_until_rollover(now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    midnight = (now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    return max(0, int((midnight - now).total_seconds()))


def format_countdown(seconds: int) -> str:
    hours, rest = divmod(max(0, int(seconds)), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def string_hash(text: str) -> int:
    """Signed 32-bit ``h * 31 + c`` hash, the same value browser clients compute."""
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def deterministic_word(key: str, pool: Sequence[str] = DEFAULT_FALLBACK_WORDS) -> str:
    return pool[abs(string_hash(key)) % len(pool)]


def deterministic_bonus_word(word: str, pool: Sequence[str] = DEFAULT_FALLBACK_WORDS) -> str:
    index = abs(string_hash(word)) % len(pool)
    if pool[index] != word:
        return pool[index]
    return pool[(index + 1) % len(pool)]


class MemoryWordCache:
    """In-process cache with the ``get(date)`` / ``set(date, record)`` contract."""

    def __init__(self):
        self._records: Dict[str, WordOfDayRecord] = {}

    def get(self, date: str) -> Optional[WordOfDayRecord]:
        return self._records.get(date)

    def set(self, date: str, record: WordOfDayRecord) -> None:
        self._records[date] = record

    def clear(self) -> None:
        self._records.clear()


class WordOfDayProvider:
    def __init__(self,
                 dictionary: DictionaryService,
                 random_source: RandomWordSource,
                 related_source: RelatedWordSource,
                 store=None,
                 cache=None,
                 clock: Callable[[], datetime] = utcnow,
                 max_attempts: int = 10,
                 fallback_words: Sequence[str] = DEFAULT_FALLBACK_WORDS,
                 related_words: Dict[str, Tuple[str, ...]] = RELATED_WORDS):
        if len(set(fallback_words)) < 2:
            raise ValueError('fallback_words needs at least two distinct words')
        self.dictionary = dictionary
        self.random_source = random_source
        self.related_source = related_source
        self.store = store
        self.cache = cache if cache is not None else MemoryWordCache()
        self.clock = clock
        self.max_attempts = max_attempts
        self.fallback_words = tuple(fallback_words)
        self.related_words = related_words

    def today(self) -> str:
        return date_key(self.clock())

    def get(self, date: Optional[str] = None) -> WordOfDayRecord:
        key = date or self.today()
        record = self.cache.get(key)
        if record is not None:
            return record

        if self.store is not None:
            try:
                record = self.store.get(key)
            except PersistenceFailure as exc:
                logger.warning("Word of day store unavailable, acquiring without it: %s", exc)

        if record is None:
            logger.info("No word of day for %s, generating a new one", key)
            record = self.acquire(key)
            if self.store is not None:
                try:
                    record = self.store.set(key, record)
                except PersistenceFailure as exc:
                    logger.warning("Could not persist word of day for %s: %s", key, exc)

        self.cache.set(key, record)
        return record

    def clear(self, date: Optional[str] = None) -> bool:
        key = date or self.today()
        self.cache.clear()
        if self.store is None:
            return False
        return self.store.clear(key)

    def definition(self, word: str) -> str:
        record = self.cache.get(self.today())
        if record is not None and record.word == word and record.definition:
            return record.definition
        return self.dictionary.lookup(word).definition or DEFAULT_DEFINITION

    def acquire(self, key: str) -> WordOfDayRecord:
        # Seeded per day so the offline path gives the same bonus word everywhere
        rng = random.Random(key)
        word, definition = self._choose_word(key)
        bonus_word = self._choose_bonus_word(word, rng)
        return WordOfDayRecord(word=word, bonusWord=bonus_word, definition=definition, date=key)

    def _choose_word(self, key: str) -> Tuple[str, str]:
        for attempt in range(1, self.max_attempts + 1):
            try:
                word = self.random_source.get_random_word(WORD_MIN_LENGTH, WORD_MAX_LENGTH)
            except AcquisitionFailure as exc:
                logger.warning("Attempt %d: %s", attempt, exc)
                break
            result = self.dictionary.lookup(word)
            if result.valid:
                logger.info("Found valid word %r on attempt %d", word, attempt)
                return word, result.definition or DEFAULT_DEFINITION
            if not result.reachable:
                logger.warning("Dictionary unreachable while checking %r", word)
                break
            logger.info("Word %r is not valid, trying again", word)
        fallback = deterministic_word(key, self.fallback_words)
        logger.warning("Using fallback word %r for %s", fallback, key)
        return fallback, DEFAULT_DEFINITION

    def _choose_bonus_word(self, word: str, rng: random.Random) -> str:
        try:
            candidates = self.related_source.get_related(word)
        except AcquisitionFailure as exc:
            logger.warning("Related words unavailable for %r: %s", word, exc)
            candidates = []

        for candidate in candidates:
            if not (WORD_MIN_LENGTH <= len(candidate) <= WORD_MAX_LENGTH) or ' ' in candidate or candidate == word:
                continue
            result = self.dictionary.lookup(candidate)
            if result.valid:
                return candidate
            if not result.reachable:
                break

        related = [w for w in self.related_words.get(word, ()) if w != word]
        if related:
            return rng.choice(related)
        return rng.choice([w for w in self.fallback_words if w != word])


class RolloverWatcher:
    """Tracks the UTC day and drops cached records once it changes."""

    def __init__(self, provider: WordOfDayProvider):
        self.provider = provider
        self.current = provider.today()

    def tick(self) -> bool:
        key = self.provider.today()
        if key == self.current:
            return False
        logger.info("Day rolled over from %s to %s", self.current, key)
        self.current = key
        self.provider.cache.clear()
        return True

    def countdown(self) -> Countdown:
        seconds = seconds_until_rollover(self.provider.clock())
        return Countdown(date=self.current, secondsLeft=seconds, countdown=format_countdown(seconds))
