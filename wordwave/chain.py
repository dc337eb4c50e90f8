"""Word-chain validation and scoring.

Everything here is pure: callers own the chain and only append to it after
``validate`` returns a score.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from .errors import RejectionReason, ValidationRejection

VOWELS = frozenset('aeiou')
LONG_WORD_POLICIES = ('exceeds', 'at_least')

TAG_LONG_WORD = 'Long Word'
TAG_VOWEL_START = 'Vowel Start'
TAG_NO_REPEAT = 'No Repeating Letters'
TAG_BONUS_WORD = 'Bonus Word'


@dataclass(frozen=True)
class GameRules:
    min_word_length: int = 3
    long_word_threshold: int = 8
    long_word_policy: str = 'exceeds'
    long_word_bonus: int = 50
    vowel_start_bonus: int = 20
    no_repeat_bonus: int = 30
    bonus_word_points: int = 100

    def __post_init__(self):
        if self.long_word_policy not in LONG_WORD_POLICIES:
            raise ValueError(f"long_word_policy must be one of {LONG_WORD_POLICIES}")

    @classmethod
    def from_config(cls, config) -> 'GameRules':
        return cls(
            min_word_length=config.MIN_WORD_LENGTH,
            long_word_threshold=config.LONG_WORD_THRESHOLD,
            long_word_policy=config.LONG_WORD_POLICY,
            long_word_bonus=config.LONG_WORD_BONUS,
            vowel_start_bonus=config.VOWEL_START_BONUS,
            no_repeat_bonus=config.NO_REPEAT_BONUS,
            bonus_word_points=config.BONUS_WORD_POINTS,
        )

    def is_long(self, word: str) -> bool:
        if self.long_word_policy == 'at_least':
            return len(word) >= self.long_word_threshold
        return len(word) > self.long_word_threshold


DEFAULT_RULES = GameRules()


@dataclass(frozen=True)
class WordScore:
    word: str
    base: int
    total: int
    bonuses: Tuple[str, ...] = ()
    is_bonus_word: bool = False


def normalize(word: str) -> str:
    return (word or '').strip().lower()


def required_letter(chain: Sequence[str]) -> str:
    """Lower-case letter the next word has to start with."""
    return chain[-1].strip().lower()[-1]


def check_word(chain: Sequence[str], word: str, rules: GameRules = DEFAULT_RULES) -> None:
    """Length, duplicate and adjacency checks, in that order."""
    if not word or len(word) < rules.min_word_length:
        raise ValidationRejection(
            RejectionReason.TOO_SHORT,
            f"Word must be at least {rules.min_word_length} letters long",
        )
    if word in {w.lower() for w in chain}:
        raise ValidationRejection(RejectionReason.DUPLICATE, 'Word already used in this chain')
    letter = required_letter(chain)
    if word[0] != letter:
        raise ValidationRejection(
            RejectionReason.WRONG_LETTER,
            f"Word must start with the letter '{letter.upper()}'",
        )


def check_dictionary(word: str, verdict: Optional[bool]) -> None:
    """Apply a dictionary verdict. ``None`` means the validator was unreachable."""
    if verdict is None:
        verdict = word.isalpha()
    if not verdict:
        raise ValidationRejection(RejectionReason.NOT_A_WORD, f"'{word}' is not a recognized word")


def score_word(word: str,
               rules: GameRules = DEFAULT_RULES,
               bonus_word: Optional[str] = None,
               found_bonus_word: bool = False) -> WordScore:
    word = normalize(word)
    base = 10 * len(word)
    total = base
    tags = []
    if rules.is_long(word):
        total += rules.long_word_bonus
        tags.append(TAG_LONG_WORD)
    if word[:1] in VOWELS:
        total += rules.vowel_start_bonus
        tags.append(TAG_VOWEL_START)
    if len(set(word)) == len(word):
        total += rules.no_repeat_bonus
        tags.append(TAG_NO_REPEAT)
    is_bonus = bool(bonus_word) and word == normalize(bonus_word) and not found_bonus_word
    if is_bonus:
        total += rules.bonus_word_points
        tags.append(TAG_BONUS_WORD)
    return WordScore(word=word, base=base, total=total, bonuses=tuple(tags), is_bonus_word=is_bonus)


def validate(chain: Sequence[str],
             candidate: str,
             bonus_word: Optional[str] = None,
             found_bonus_word: bool = False,
             rules: GameRules = DEFAULT_RULES,
             is_word: Optional[Callable[[str], Optional[bool]]] = None) -> WordScore:
    """Validate ``candidate`` against ``chain`` and score it.

    Raises ValidationRejection on the first failing rule. ``is_word`` is the
    optional dictionary check; it is only consulted once the cheap rules pass.
    """
    if not chain:
        raise ValueError('chain must contain the starting word')
    word = normalize(candidate)
    check_word(chain, word, rules)
    if is_word is not None:
        check_dictionary(word, is_word(word))
    return score_word(word, rules, bonus_word, found_bonus_word)


def is_valid_chain(chain: Sequence[str]) -> bool:
    seen = set()
    prev = None
    for raw in chain:
        word = normalize(raw)
        if not word or word in seen:
            return False
        if prev is not None and word[0] != prev[-1]:
            return False
        seen.add(word)
        prev = word
    return True
