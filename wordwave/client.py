"""Client-side access to the word-of-day and leaderboard APIs.

Mirrors what a browser client does: today's word is cached locally and the
server is only asked when the cache is stale. With no server at all the word is
derived from the date, so offline clients still agree with each other.
"""
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Callable, List, Optional

import requests
from pydantic import ValidationError

from .config import DEFAULT_FALLBACK_WORDS, Config
from .dictionary import DEFAULT_DEFINITION, DictionaryService
from .errors import PersistenceFailure
from .schemas import LeaderboardEntry, LeaderboardScore, WordOfDayRecord
from .session import ANONYMOUS_EMAIL
from .word_of_day import date_key, deterministic_bonus_word, deterministic_word, utcnow

logger = logging.getLogger(__name__)


class JsonFileWordCache:
    """Keeps the last word-of-day record in a JSON file, like browser local storage."""

    def __init__(self, path):
        self.path = Path(path)

    def get(self, date: str) -> Optional[WordOfDayRecord]:
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
            record = WordOfDayRecord.model_validate(data)
        except FileNotFoundError:
            return None
        except ValueError as exc:
            logger.warning("Ignoring unreadable word cache %s: %s", self.path, exc)
            return None
        return record if record.date == date else None

    def set(self, date: str, record: WordOfDayRecord) -> None:
        record = record.model_copy(update={'date': date})
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(record.model_dump(), ensure_ascii=False), encoding='utf-8')

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class WordOfDayClient:
    def __init__(self, cache,
                 base_url: str = Config.SERVER_URL,
                 http: Optional[requests.Session] = None,
                 dictionary: Optional[DictionaryService] = None,
                 clock: Callable = utcnow,
                 timeout: float = Config.SERVER_TIMEOUT_SEC,
                 fallback_words=DEFAULT_FALLBACK_WORDS):
        self.cache = cache
        self.base_url = base_url.rstrip('/')
        self.http = http or requests.Session()
        self.dictionary = dictionary
        self.clock = clock
        self.timeout = timeout
        self.fallback_words = tuple(fallback_words)

    def today(self) -> str:
        return date_key(self.clock())

    def get_word_of_the_day(self) -> WordOfDayRecord:
        today = self.today()
        cached = self.cache.get(today)
        if cached is not None:
            logger.debug("Using cached word of the day %r", cached.word)
            return cached
        try:
            resp = self.http.get(f"{self.base_url}/api/words/word-of-day",
                                 headers={'Accept': 'application/json'}, timeout=self.timeout)
            resp.raise_for_status()
            record = WordOfDayRecord.model_validate(resp.json())
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Word of the day server unavailable, using fallback: %s", exc)
            word = deterministic_word(today, self.fallback_words)
            record = WordOfDayRecord(word=word,
                                     bonusWord=deterministic_bonus_word(word, self.fallback_words),
                                     definition=DEFAULT_DEFINITION, date=today)
        self.cache.set(today, record)
        return record

    def get_word_definition(self, word: str) -> str:
        cached = self.cache.get(self.today())
        if cached is not None and cached.word == word and cached.definition:
            return cached.definition
        if self.dictionary is None:
            return DEFAULT_DEFINITION
        return self.dictionary.lookup(word).definition or DEFAULT_DEFINITION

    def get_bonus_word(self) -> Optional[str]:
        cached = self.cache.get(self.today())
        return cached.bonusWord if cached else None

    def check_bonus_word(self, word: str) -> bool:
        bonus = self.get_bonus_word()
        return bool(bonus) and word.strip().lower() == bonus.lower()

    def force_refresh(self) -> WordOfDayRecord:
        self.cache.clear()
        return self.get_word_of_the_day()

    def test_connection(self) -> dict:
        try:
            resp = self.http.get(f"{self.base_url}/api/words/test", timeout=self.timeout)
            resp.raise_for_status()
            return {'success': True, 'message': resp.json().get('message')}
        except (requests.RequestException, ValueError) as exc:
            return {'success': False, 'error': str(exc)}


class LeaderboardClient:
    def __init__(self, base_url: str = Config.SERVER_URL,
                 http: Optional[requests.Session] = None,
                 timeout: float = Config.SERVER_TIMEOUT_SEC):
        self.url = f"{base_url.rstrip('/')}/api/leaderboard"
        self.http = http or requests.Session()
        self.timeout = timeout

    def get_top_scores(self) -> List[LeaderboardScore]:
        try:
            resp = self.http.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            return [LeaderboardScore.model_validate(item) for item in resp.json()]
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error fetching leaderboard: %s", exc)
            return []

    def save_score(self, name: str, score: int, email: Optional[str] = None) -> None:
        try:
            entry = LeaderboardEntry(name=(name or '').strip(), email=(email or '').strip() or ANONYMOUS_EMAIL,
                                     score=score)
            resp = self.http.post(self.url, json=entry.model_dump(), timeout=self.timeout)
            resp.raise_for_status()
        except (requests.RequestException, ValidationError) as exc:
            logger.error("Error saving score: %s", exc)
            raise PersistenceFailure('Failed to save score') from exc
