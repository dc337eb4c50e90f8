from __future__ import annotations
from enum import Enum


class RejectionReason(str, Enum):
    TOO_SHORT = 'too_short'
    DUPLICATE = 'duplicate'
    WRONG_LETTER = 'wrong_letter'
    NOT_A_WORD = 'not_a_word'


class WordwaveError(Exception):
    pass


class ValidationRejection(WordwaveError):
    """A candidate word was refused. The session is left untouched."""

    def __init__(self, reason: RejectionReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class AcquisitionFailure(WordwaveError):
    """An external word source or the dictionary could not be reached."""


class PersistenceFailure(WordwaveError):
    """Reading or writing a store failed."""


class SessionError(WordwaveError):
    pass
