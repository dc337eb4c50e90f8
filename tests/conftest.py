from datetime import datetime, timedelta, timezone

import pytest
import requests

from wordwave.dictionary import LookupResult
from wordwave.errors import AcquisitionFailure
from wordwave.schemas import WordOfDayRecord


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeHttp:
    """Stands in for requests.Session; ``handler(method, url, kwargs)`` returns a response or raises."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append(('GET', url, kwargs))
        return self.handler('GET', url, kwargs)

    def post(self, url, **kwargs):
        self.calls.append(('POST', url, kwargs))
        return self.handler('POST', url, kwargs)


class FakeDictionary:
    def __init__(self, words=(), reachable=True, definitions=None):
        self.words = {w.lower() for w in words}
        self.reachable = reachable
        self.definitions = definitions or {}
        self.lookups = []

    def lookup(self, word):
        w = word.strip().lower()
        self.lookups.append(w)
        if not self.reachable:
            return LookupResult(word=w, valid=None)
        if w in self.words:
            return LookupResult(word=w, valid=True, definition=self.definitions.get(w, f"noun: {w}"))
        return LookupResult(word=w, valid=False)

    def is_valid(self, word):
        return self.lookup(word).valid

    def definition(self, word):
        return self.lookup(word).definition


class FakeRandomSource:
    def __init__(self, words=None):
        self.words = list(words or [])
        self.calls = 0

    def get_random_word(self, min_len=4, max_len=8):
        self.calls += 1
        if not self.words:
            raise AcquisitionFailure('random word source offline')
        if len(self.words) == 1:
            return self.words[0]
        return self.words.pop(0)


class FakeRelatedSource:
    def __init__(self, related=None):
        self.related = related
        self.calls = 0

    def get_related(self, word):
        self.calls += 1
        if self.related is None:
            raise AcquisitionFailure('related words source offline')
        return list(self.related)


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeSio:
    def __init__(self):
        self.emitted = []

    async def emit(self, event, data=None, to=None, room=None):
        self.emitted.append((event, data, to))

    def events(self, name):
        return [data for event, data, _ in self.emitted if event == name]


@pytest.fixture()
def clock():
    return FakeClock(datetime(2024, 3, 14, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture()
def record():
    return WordOfDayRecord(word='chain', bonusWord='night', definition='noun: a series of links', date='2024-03-14')

