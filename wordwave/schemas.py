from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

SessionStatus = Literal['ready', 'playing', 'finished']
MessageType = Literal['success', 'error', 'info', '']


class WordOfDayRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    word: str
    bonusWord: str
    definition: str = ''
    date: str  # UTC 'YYYY-MM-DD'


class WordEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    word: str
    score: int
    isBonusWord: bool = False
    bonuses: List[str] = []


class LeaderboardEntry(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    score: int = Field(..., ge=0)


class LeaderboardScore(BaseModel):
    name: str
    score: int


class TimerState(BaseModel):
    timeLeft: int
    duration: int
    isRunning: bool = False


class Countdown(BaseModel):
    date: str
    secondsLeft: int
    countdown: str  # 'HH:MM:SS'


class DictionaryResult(BaseModel):
    word: str
    valid: bool
    definition: Optional[str] = None


class SessionState(BaseModel):
    state: SessionStatus
    chain: List[str] = []
    score: int = 0
    timeLeft: int
    foundBonusWord: bool = False
    history: List[WordEntry] = []
    wordCount: int = 0
    firstWord: Optional[str] = None
    requiredLetter: Optional[str] = None
    letterHint: Optional[str] = None
    definitionHint: Optional[str] = None
    message: str = ''
    messageType: MessageType = ''
    pending: bool = False
    progressColor: Literal['green', 'yellow', 'red'] = 'green'
