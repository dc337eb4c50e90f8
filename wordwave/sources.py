"""External word sources used to pick the word of the day."""
from __future__ import annotations
import logging
from typing import List, Optional

import requests

from .config import Config
from .errors import AcquisitionFailure

logger = logging.getLogger(__name__)

RANDOM_WORD_URL = 'https://random-word.ryanrk.com/api/en/word/random/'
RELATED_WORDS_URL = 'https://api.datamuse.com/words'


class RandomWordSource:
    def __init__(self, http: Optional[requests.Session] = None,
                 timeout: float = Config.SOURCE_TIMEOUT_SEC,
                 url: str = RANDOM_WORD_URL):
        self.http = http or requests.Session()
        self.timeout = timeout
        self.url = url

    def get_random_word(self, min_len: int = 4, max_len: int = 8) -> str:
        try:
            resp = self.http.get(self.url, params={'minlength': min_len, 'maxlength': max_len},
                                 timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise AcquisitionFailure(f"random word source failed: {exc}") from exc
        if not data or not isinstance(data, list) or not isinstance(data[0], str):
            raise AcquisitionFailure('random word source returned empty or invalid data')
        return data[0].strip().lower()


class RelatedWordSource:
    def __init__(self, http: Optional[requests.Session] = None,
                 timeout: float = Config.SOURCE_TIMEOUT_SEC,
                 url: str = RELATED_WORDS_URL,
                 limit: int = 15):
        self.http = http or requests.Session()
        self.timeout = timeout
        self.url = url
        self.limit = limit

    def get_related(self, word: str) -> List[str]:
        try:
            resp = self.http.get(self.url, params={'ml': word, 'max': self.limit}, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise AcquisitionFailure(f"related words source failed: {exc}") from exc
        if not isinstance(data, list):
            raise AcquisitionFailure('related words source returned invalid data')
        return [item['word'].lower() for item in data if isinstance(item, dict) and isinstance(item.get('word'), str)]
