from datetime import datetime, timedelta, timezone

import pytest

from conftest import FakeClock, FakeDictionary, FakeRandomSource, FakeRelatedSource
from wordwave.config import DEFAULT_FALLBACK_WORDS
from wordwave.dictionary import DEFAULT_DEFINITION
from wordwave.store import WordOfDayStore, init_db, make_engine
from wordwave.word_of_day import (
    RELATED_WORDS, MemoryWordCache, RolloverWatcher, WordOfDayProvider, date_key, deterministic_bonus_word,
    deterministic_word, format_countdown, seconds_until_rollover, string_hash,
)


def make_provider(clock, dictionary=None, random_source=None, related_source=None, **kwargs):
    return WordOfDayProvider(
        dictionary=dictionary or FakeDictionary(reachable=False),
        random_source=random_source or FakeRandomSource(),
        related_source=related_source or FakeRelatedSource(),
        clock=clock,
        **kwargs,
    )


def test_string_hash_matches_browser_hash():
    assert string_hash('') == 0
    assert string_hash('a') == 97
    assert string_hash('ab') == 97 * 31 + 98
    value = string_hash('2024-03-14 and a much longer string to force overflow')
    assert -2 ** 31 <= value < 2 ** 31


def test_deterministic_words():
    word = deterministic_word('2024-03-14')
    assert word in DEFAULT_FALLBACK_WORDS
    assert deterministic_word('2024-03-14') == word
    bonus = deterministic_bonus_word(word)
    assert bonus in DEFAULT_FALLBACK_WORDS
    assert bonus != word


def test_date_key_uses_utc():
    late_evening = datetime(2024, 3, 14, 23, 30, tzinfo=timezone.utc)
    assert date_key(late_evening) == '2024-03-14'
    ahead_of_utc = timezone(timedelta(hours=5))
    assert date_key(datetime(2024, 3, 15, 2, 0, tzinfo=ahead_of_utc)) == '2024-03-14'


def test_countdown_helpers():
    assert seconds_until_rollover(datetime(2024, 3, 14, 23, 59, 59, tzinfo=timezone.utc)) == 1
    assert seconds_until_rollover(datetime(2024, 3, 14, 0, 0, 0, tzinfo=timezone.utc)) == 86400
    assert format_countdown(3661) == '01:01:01'
    assert format_countdown(0) == '00:00:00'


def test_offline_selection_is_deterministic(clock):
    first = make_provider(clock).get()
    second = make_provider(clock).get()
    assert first == second
    assert first.date == '2024-03-14'
    assert first.word == deterministic_word('2024-03-14')
    assert first.bonusWord != first.word
    assert first.definition == DEFAULT_DEFINITION


def test_retries_until_dictionary_accepts(clock):
    dictionary = FakeDictionary(words=['plant', 'garden'])
    random_source = FakeRandomSource(['zzzq', 'xqvw', 'plant'])
    provider = make_provider(clock, dictionary, random_source, FakeRelatedSource(['a phrase', 'go', 'flora', 'garden']))
    record = provider.get()
    assert record.word == 'plant'
    assert record.definition == 'noun: plant'
    assert record.bonusWord == 'garden'
    assert random_source.calls == 3


def test_exhausted_attempts_use_fallback_pool(clock):
    random_source = FakeRandomSource(['zzzz'])
    provider = make_provider(clock, FakeDictionary(words=['chain']), random_source, max_attempts=3)
    record = provider.get()
    assert random_source.calls == 3
    assert record.word == deterministic_word('2024-03-14')


def test_bonus_word_from_static_table(clock):
    provider = make_provider(clock, FakeDictionary(words=['plant']), FakeRandomSource(['plant']))
    assert provider.get().bonusWord in RELATED_WORDS['plant']


def test_bonus_word_from_pool_when_no_related_words(clock):
    provider = make_provider(clock, FakeDictionary(words=['zebra']), FakeRandomSource(['zebra']),
                             FakeRelatedSource([]))
    record = provider.get()
    assert record.word == 'zebra'
    assert record.bonusWord in DEFAULT_FALLBACK_WORDS


def test_bonus_word_differs_from_word(clock):
    provider = make_provider(clock, FakeDictionary(words=['plant']), FakeRandomSource(['plant']),
                             FakeRelatedSource(['plant', 'plants']))
    record = provider.get()
    assert record.bonusWord != 'plant'


def test_cached_record_skips_sources(clock):
    random_source = FakeRandomSource(['plant'])
    provider = make_provider(clock, FakeDictionary(words=['plant']), random_source)
    first = provider.get()
    second = provider.get()
    assert first is second
    assert random_source.calls == 1


def test_store_shared_between_providers(clock):
    engine = make_engine('sqlite://')
    init_db(engine)
    store = WordOfDayStore(engine)
    first = make_provider(clock, FakeDictionary(words=['plant']), FakeRandomSource(['plant']), store=store).get()
    random_source = FakeRandomSource(['house'])
    second = make_provider(clock, FakeDictionary(words=['house']), random_source, store=store).get()
    assert second == first
    assert random_source.calls == 0


def test_clear_forces_new_acquisition(clock):
    engine = make_engine('sqlite://')
    init_db(engine)
    random_source = FakeRandomSource(['plant', 'house'])
    provider = make_provider(clock, FakeDictionary(words=['plant', 'house']), random_source,
                             store=WordOfDayStore(engine))
    assert provider.get().word == 'plant'
    assert provider.clear()
    assert provider.get().word == 'house'


def test_rollover_rederives_word():
    clock = FakeClock(datetime(2024, 3, 14, 23, 59, 59, tzinfo=timezone.utc))
    random_source = FakeRandomSource(['plant', 'house'])
    provider = make_provider(clock, FakeDictionary(words=['plant', 'house']), random_source)
    watcher = RolloverWatcher(provider)
    today = provider.get()
    assert today.date == '2024-03-14'
    assert watcher.countdown().countdown == '00:00:01'
    assert not watcher.tick()

    clock.advance(seconds=1)
    assert watcher.tick()
    assert provider.cache.get('2024-03-14') is None
    tomorrow = provider.get()
    assert tomorrow.date == '2024-03-15'
    assert tomorrow.word == 'house'
    assert watcher.countdown().date == '2024-03-15'
    assert not watcher.tick()


def test_definition_prefers_todays_record(clock):
    provider = make_provider(clock, FakeDictionary(words=['plant', 'garden']), FakeRandomSource(['plant']),
                             FakeRelatedSource(['garden']))
    record = provider.get()
    assert provider.definition(record.word) == 'noun: plant'
    assert provider.definition(record.bonusWord) == 'noun: garden'
    assert provider.definition('qqqq') == DEFAULT_DEFINITION


def test_memory_cache_contract(record):
    cache = MemoryWordCache()
    assert cache.get('2024-03-14') is None
    cache.set('2024-03-14', record)
    assert cache.get('2024-03-14') == record
    cache.clear()
    assert cache.get('2024-03-14') is None


def test_fallback_pool_needs_two_words(clock):
    with pytest.raises(ValueError):
        make_provider(clock, fallback_words=('chain',))
