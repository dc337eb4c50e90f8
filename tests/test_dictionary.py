import pytest
import requests

from conftest import FakeHttp, FakeResponse
from wordwave.dictionary import DEFAULT_DEFINITION, DictionaryService, first_definition
from wordwave.errors import AcquisitionFailure
from wordwave.sources import RandomWordSource, RelatedWordSource

ENTRY = [{
    'word': 'chain',
    'meanings': [{'partOfSpeech': 'noun', 'definitions': [{'definition': 'A series of interconnected rings.'}]}],
}]


def test_lookup_valid_word_with_definition():
    http = FakeHttp(lambda method, url, kwargs: FakeResponse(200, ENTRY))
    service = DictionaryService(http=http, timeout=1)
    result = service.lookup(' Chain ')
    assert result.valid is True
    assert result.definition == 'noun: A series of interconnected rings.'
    assert http.calls[0][1].endswith('/chain')
    assert http.calls[0][2]['timeout'] == 1


def test_lookup_caches_reachable_answers():
    http = FakeHttp(lambda method, url, kwargs: FakeResponse(404, {'title': 'No Definitions Found'}))
    service = DictionaryService(http=http)
    assert service.is_valid('qzxv') is False
    assert service.is_valid('qzxv') is False
    assert len(http.calls) == 1


def test_lookup_without_meanings_uses_default_definition():
    http = FakeHttp(lambda method, url, kwargs: FakeResponse(200, [{'word': 'chain'}]))
    assert DictionaryService(http=http).definition('chain') == DEFAULT_DEFINITION


def offline(method, url, kwargs):
    raise requests.ConnectionError('network down')


@pytest.mark.parametrize('handler', [
    offline,
    lambda method, url, kwargs: FakeResponse(503, None),
    lambda method, url, kwargs: FakeResponse(200, ValueError('not json')),
])
def test_unreachable_dictionary_is_unknown(handler):
    http = FakeHttp(handler)
    service = DictionaryService(http=http)
    result = service.lookup('chain')
    assert result.valid is None
    assert not result.reachable
    service.lookup('chain')
    assert len(http.calls) == 2


def test_empty_word_is_invalid_without_network():
    http = FakeHttp(offline)
    assert DictionaryService(http=http).is_valid('  ') is False
    assert http.calls == []


def test_first_definition_handles_bad_payloads():
    assert first_definition([]) is None
    assert first_definition({'oops': 1}) is None


def test_random_word_source():
    http = FakeHttp(lambda method, url, kwargs: FakeResponse(200, ['Plant']))
    assert RandomWordSource(http=http).get_random_word(4, 8) == 'plant'
    assert http.calls[0][2]['params'] == {'minlength': 4, 'maxlength': 8}


@pytest.mark.parametrize('handler', [
    offline,
    lambda method, url, kwargs: FakeResponse(500, None),
    lambda method, url, kwargs: FakeResponse(200, []),
])
def test_random_word_source_failures(handler):
    with pytest.raises(AcquisitionFailure):
        RandomWordSource(http=FakeHttp(handler)).get_random_word()


def test_related_word_source():
    payload = [{'word': 'Link', 'score': 100}, {'word': 'metal chain'}, {'score': 3}]
    http = FakeHttp(lambda method, url, kwargs: FakeResponse(200, payload))
    assert RelatedWordSource(http=http).get_related('chain') == ['link', 'metal chain']
    assert http.calls[0][2]['params'] == {'ml': 'chain', 'max': 15}


def test_related_word_source_failure():
    with pytest.raises(AcquisitionFailure):
        RelatedWordSource(http=FakeHttp(offline)).get_related('chain')


def test_cache_is_bounded_and_evicts_least_recently_used():
    http = FakeHttp(lambda method, url, kwargs: FakeResponse(404, {'title': 'No Definitions Found'}))
    service = DictionaryService(http=http, cache_size=2)
    service.lookup('aaaa')
    service.lookup('bbbb')
    service.lookup('aaaa')
    service.lookup('cccc')
    assert len(http.calls) == 3
    service.lookup('aaaa')
    assert len(http.calls) == 3
    service.lookup('bbbb')
    assert len(http.calls) == 4


def test_many_distinct_words_do_not_grow_cache_past_its_size():
    http = FakeHttp(lambda method, url, kwargs: FakeResponse(404, None))
    service = DictionaryService(http=http, cache_size=100)
    for i in range(500):
        service.is_valid(f"word{i}")
    assert len(service._cache) == 100
