from __future__ import annotations
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import requests

from .config import Config

logger = logging.getLogger(__name__)

DICTIONARY_URL = 'https://api.dictionaryapi.dev/api/v2/entries/en/{word}'
DEFAULT_DEFINITION = 'A word to start your chain with!'


@dataclass(frozen=True)
class LookupResult:
    word: str
    valid: Optional[bool]  # None when the dictionary could not be reached
    definition: Optional[str] = None

    @property
    def reachable(self) -> bool:
        return self.valid is not None


def first_definition(data) -> Optional[str]:
    """'<part of speech>: <definition>' from a dictionaryapi.dev payload."""
    try:
        meaning = data[0]['meanings'][0]
        return f"{meaning['partOfSpeech']}: {meaning['definitions'][0]['definition']}"
    except (IndexError, KeyError, TypeError):
        return None


class DictionaryService:
    def __init__(self, http: Optional[requests.Session] = None,
                 timeout: float = Config.DICTIONARY_TIMEOUT_SEC,
                 url: str = DICTIONARY_URL,
                 cache_size: int = Config.DICTIONARY_CACHE_SIZE):
        self.http = http or requests.Session()
        self.timeout = timeout
        self.url = url
        self.cache_size = cache_size
        # Only answers from a reachable dictionary are remembered, least recently used evicted first
        self._cache: OrderedDict[str, LookupResult] = OrderedDict()
        self._lock = threading.Lock()

    def lookup(self, word: str) -> LookupResult:
        w = (word or '').strip().lower()
        if not w:
            return LookupResult(word=w, valid=False)
        cached = self._cached(w)
        if cached is not None:
            return cached
        try:
            resp = self.http.get(self.url.format(word=quote(w)), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Dictionary unreachable for %r: %s", w, exc)
            return LookupResult(word=w, valid=None)
        if 400 <= resp.status_code < 500:
            result = LookupResult(word=w, valid=False)
        elif not resp.ok:
            logger.warning("Dictionary responded %s for %r", resp.status_code, w)
            return LookupResult(word=w, valid=None)
        else:
            try:
                data = resp.json()
            except ValueError:
                logger.warning("Dictionary returned malformed JSON for %r", w)
                return LookupResult(word=w, valid=None)
            result = LookupResult(word=w, valid=True, definition=first_definition(data) or DEFAULT_DEFINITION)
        self._remember(w, result)
        return result

    def _cached(self, word: str) -> Optional[LookupResult]:
        with self._lock:
            result = self._cache.get(word)
            if result is not None:
                self._cache.move_to_end(word)
            return result

    def _remember(self, word: str, result: LookupResult):
        with self._lock:
            self._cache[word] = result
            self._cache.move_to_end(word)
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)

    def is_valid(self, word: str) -> Optional[bool]:
        return self.lookup(word).valid

    def definition(self, word: str) -> Optional[str]:
        return self.lookup(word).definition

