from __future__ import annotations
import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_FALLBACK_WORDS = (
    'chain', 'start', 'plant', 'table', 'house', 'light', 'music',
    'brain', 'dance', 'world', 'smile', 'green', 'bread', 'phone',
    'water', 'earth', 'paper', 'glass', 'dream', 'color', 'ocean',
)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


def _words(name: str, default: tuple) -> tuple:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(w.strip().lower() for w in raw.split(',') if w.strip())


class Config:
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///wordwave.sqlite3')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*').split(',')

    # Chain rules
    MIN_WORD_LENGTH = int(os.getenv('MIN_WORD_LENGTH', '3'))
    LONG_WORD_THRESHOLD = int(os.getenv('LONG_WORD_THRESHOLD', '8'))
    # 'exceeds' (len > threshold) or 'at_least' (len >= threshold)
    LONG_WORD_POLICY = os.getenv('LONG_WORD_POLICY', 'exceeds')
    LONG_WORD_BONUS = int(os.getenv('LONG_WORD_BONUS', '50'))
    VOWEL_START_BONUS = int(os.getenv('VOWEL_START_BONUS', '20'))
    NO_REPEAT_BONUS = int(os.getenv('NO_REPEAT_BONUS', '30'))
    BONUS_WORD_POINTS = int(os.getenv('BONUS_WORD_POINTS', '100'))
    CHECK_DICTIONARY = _flag('CHECK_DICTIONARY', 'true')

    # Session
    SESSION_DURATION_SEC = int(os.getenv('SESSION_DURATION_SEC', '60'))
    MESSAGE_TTL_SEC = float(os.getenv('MESSAGE_TTL_SEC', '1.5'))
    HINT_LETTER_AT_SEC = int(os.getenv('HINT_LETTER_AT_SEC', '35'))
    HINT_DEFINITION_AT_SEC = int(os.getenv('HINT_DEFINITION_AT_SEC', '30'))
    HINT_DEFINITION_SCORE = int(os.getenv('HINT_DEFINITION_SCORE', '1500'))

    # Word of the day
    MAX_WORD_ATTEMPTS = int(os.getenv('MAX_WORD_ATTEMPTS', '10'))
    FALLBACK_WORDS = _words('FALLBACK_WORDS', DEFAULT_FALLBACK_WORDS)
    DICTIONARY_TIMEOUT_SEC = float(os.getenv('DICTIONARY_TIMEOUT_SEC', '3'))
    DICTIONARY_CACHE_SIZE = int(os.getenv('DICTIONARY_CACHE_SIZE', '1024'))
    SOURCE_TIMEOUT_SEC = float(os.getenv('SOURCE_TIMEOUT_SEC', '5'))
    SERVER_TIMEOUT_SEC = float(os.getenv('SERVER_TIMEOUT_SEC', '5'))
    SERVER_URL = os.getenv('SERVER_URL', 'http://localhost:8000')

    LEADERBOARD_LIMIT = int(os.getenv('LEADERBOARD_LIMIT', '5'))


class TestingConfig(Config):
    DATABASE_URL = 'sqlite://'
    CHECK_DICTIONARY = False
    LOG_LEVEL = 'DEBUG'
