from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from .chain import DEFAULT_RULES, GameRules, WordScore, check_dictionary, check_word, normalize, required_letter, score_word
from .dictionary import DEFAULT_DEFINITION
from .errors import SessionError, ValidationRejection
from .schemas import LeaderboardEntry, SessionState, WordEntry, WordOfDayRecord

logger = logging.getLogger(__name__)

READY = 'ready'
PLAYING = 'playing'
FINISHED = 'finished'

ANONYMOUS_EMAIL = 'anonymous@example.com'

EVENT_LETTER_HINT = 'hint:letter'
EVENT_DEFINITION_HINT = 'hint:definition'
EVENT_FINISHED = 'finished'


@dataclass(frozen=True)
class SessionSettings:
    duration: int = 60
    message_ttl: float = 1.5
    hint_letter_at: int = 35
    hint_definition_at: int = 30
    hint_definition_score: int = 1500

    @classmethod
    def from_config(cls, config) -> 'SessionSettings':
        return cls(
            duration=config.SESSION_DURATION_SEC,
            message_ttl=config.MESSAGE_TTL_SEC,
            hint_letter_at=config.HINT_LETTER_AT_SEC,
            hint_definition_at=config.HINT_DEFINITION_AT_SEC,
            hint_definition_score=config.HINT_DEFINITION_SCORE,
        )


class GameSession:
    """One player's run: ready -> playing -> finished.

    Time only moves through ``tick()``, one call per elapsed second.
    """

    def __init__(self, rules: GameRules = DEFAULT_RULES,
                 settings: SessionSettings = SessionSettings(),
                 dictionary=None,
                 clock: Callable[[], float] = time.monotonic):
        self.rules = rules
        self.settings = settings
        self.dictionary = dictionary
        self.clock = clock
        self.state = READY
        self.record: Optional[WordOfDayRecord] = None
        self.bonus_definition: Optional[str] = None
        self._generation = 0
        self._reset()

    def _reset(self):
        self.chain: List[str] = []
        self.history: List[WordEntry] = []
        self.score = 0
        self.time_left = self.settings.duration
        self.found_bonus_word = False
        self.letter_hint: Optional[str] = None
        self.definition_hint: Optional[str] = None
        self.pending = False
        self._message = ''
        self._message_type = ''
        self._message_until = 0.0

    @property
    def bonus_word(self) -> Optional[str]:
        return self.record.bonusWord if self.record else None

    def start(self, record: Optional[WordOfDayRecord], bonus_definition: Optional[str] = None):
        if record is None or not record.word:
            raise SessionError('No word of the day available. Please reload the page.')
        self._reset()
        self._generation += 1
        self.record = record
        self.bonus_definition = bonus_definition
        self.chain = [normalize(record.word)]
        self.state = PLAYING

    def finish(self):
        if self.state == PLAYING:
            self.state = FINISHED
            self.time_left = 0

    def tick(self) -> List[str]:
        if self.state != PLAYING:
            return []
        self.time_left = max(0, self.time_left - 1)
        events = self._check_hints()
        if self.time_left == 0:
            self.finish()
            events.append(EVENT_FINISHED)
        return events

    def _check_hints(self) -> List[str]:
        events = []
        if self.letter_hint is None and self.bonus_word and self.time_left <= self.settings.hint_letter_at:
            self.letter_hint = self.bonus_word[0].upper()
            events.append(EVENT_LETTER_HINT)
        if (self.definition_hint is None and self.bonus_word
                and self.score > self.settings.hint_definition_score
                and self.time_left <= self.settings.hint_definition_at):
            self.definition_hint = self.bonus_definition or DEFAULT_DEFINITION
            events.append(EVENT_DEFINITION_HINT)
        return events

    def submit(self, candidate: str) -> Optional[WordEntry]:
        """Validate and apply a word, consulting the dictionary in-line.

        Returns the new entry, ``None`` when the submission is ignored, and
        raises ValidationRejection when the word is refused.
        """
        word = self._accepting(candidate)
        if word is None:
            return None
        try:
            check_word(self.chain, word, self.rules)
            if self.dictionary is not None:
                check_dictionary(word, self.dictionary.is_valid(word))
        except ValidationRejection as exc:
            self._reject(exc)
            raise
        return self._accept(score_word(word, self.rules, self.bonus_word, self.found_bonus_word))

    async def submit_async(self, candidate: str) -> Optional[WordEntry]:
        """Like ``submit`` but the dictionary call runs off the event loop.

        While it is in flight further submissions are ignored, and a result
        that arrives after the session stopped playing is dropped.
        """
        word = self._accepting(candidate)
        if word is None:
            return None
        try:
            check_word(self.chain, word, self.rules)
        except ValidationRejection as exc:
            self._reject(exc)
            raise
        if self.dictionary is not None:
            generation = self._generation
            self.pending = True
            try:
                verdict = await asyncio.to_thread(self.dictionary.is_valid, word)
            finally:
                if generation == self._generation:
                    self.pending = False
            if self.state != PLAYING or generation != self._generation:
                logger.info("Dropping late validation of %r", word)
                return None
            try:
                check_dictionary(word, verdict)
            except ValidationRejection as exc:
                self._reject(exc)
                raise
        return self._accept(score_word(word, self.rules, self.bonus_word, self.found_bonus_word))

    def _accepting(self, candidate: str) -> Optional[str]:
        if self.state != PLAYING or self.pending:
            return None
        return normalize(candidate) or None

    def _accept(self, result: WordScore) -> WordEntry:
        entry = WordEntry(word=result.word, score=result.total,
                          isBonusWord=result.is_bonus_word, bonuses=list(result.bonuses))
        self.chain.append(result.word)
        self.history.append(entry)
        self.score += result.total
        if result.is_bonus_word:
            self.found_bonus_word = True
        self._set_message(f"+{result.total} points!", 'success')
        self._check_hints()
        return entry

    def _reject(self, exc: ValidationRejection):
        self._set_message(exc.message, 'error')

    def _set_message(self, text: str, kind: str):
        self._message = text
        self._message_type = kind
        self._message_until = self.clock() + self.settings.message_ttl

    @property
    def message(self) -> str:
        if self._message and self.clock() >= self._message_until:
            self._message = ''
            self._message_type = ''
        return self._message

    @property
    def progress_color(self) -> str:
        if self.time_left > 45:
            return 'green'
        if self.time_left > 20:
            return 'yellow'
        return 'red'

    def score_entry(self, name: str, email: Optional[str] = None) -> LeaderboardEntry:
        if self.state != FINISHED:
            raise SessionError('Scores can only be submitted once the game is over')
        if not name or not name.strip():
            raise SessionError('Please enter your name to submit your score.')
        return LeaderboardEntry(name=name.strip(), email=(email or '').strip() or ANONYMOUS_EMAIL, score=self.score)

    def snapshot(self) -> SessionState:
        message = self.message
        return SessionState(
            state=self.state,
            chain=list(self.chain),
            score=self.score,
            timeLeft=self.time_left,
            foundBonusWord=self.found_bonus_word,
            history=list(self.history),
            wordCount=max(0, len(self.chain) - 1),
            firstWord=self.chain[0] if self.chain else None,
            requiredLetter=required_letter(self.chain).upper() if self.chain else None,
            letterHint=self.letter_hint,
            definitionHint=self.definition_hint,
            message=message,
            messageType=self._message_type if message else '',
            pending=self.pending,
            progressColor=self.progress_color,
        )
