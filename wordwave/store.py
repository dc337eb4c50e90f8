from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import create_engine, delete, desc, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.schema import Column
from sqlalchemy.types import DateTime, Integer, String, Text

from .errors import PersistenceFailure
from .schemas import LeaderboardEntry, LeaderboardScore, WordOfDayRecord

logger = logging.getLogger(__name__)


def _utcnow():
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class WordOfDay(Base):
    __tablename__ = 'words_of_day'
    id = Column(Integer, primary_key=True)
    word = Column(String, nullable=False)
    bonus_word = Column(String, nullable=False)
    definition = Column(Text, default='')
    date = Column(String(10), nullable=False, unique=True)
    created_at = Column(DateTime, default=_utcnow)

    def to_record(self) -> WordOfDayRecord:
        return WordOfDayRecord(word=self.word, bonusWord=self.bonus_word,
                               definition=self.definition or '', date=self.date)


class Leaderboard(Base):
    __tablename__ = 'leaderboard'
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    score = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=_utcnow)


def make_engine(url: str) -> Engine:
    if url in ('sqlite://', 'sqlite:///:memory:'):
        # One shared connection so every session sees the same in-memory database
        return create_engine(url, connect_args={'check_same_thread': False}, poolclass=StaticPool)
    if url.startswith('sqlite'):
        return create_engine(url, connect_args={'check_same_thread': False})
    return create_engine(url)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)


class WordOfDayStore:
    """Word-of-day records keyed by UTC date. The first record written for a date wins."""

    def __init__(self, engine: Engine):
        self.Session = sessionmaker(bind=engine, expire_on_commit=False)

    def get(self, date: str) -> Optional[WordOfDayRecord]:
        try:
            with self.Session() as session:
                row = session.execute(select(WordOfDay).where(WordOfDay.date == date)).scalars().first()
                return row.to_record() if row else None
        except SQLAlchemyError as exc:
            logger.error("Failed to read word of day for %s: %s", date, exc)
            raise PersistenceFailure(str(exc)) from exc

    def set(self, date: str, record: WordOfDayRecord) -> WordOfDayRecord:
        try:
            with self.Session() as session:
                session.add(WordOfDay(word=record.word, bonus_word=record.bonusWord,
                                      definition=record.definition, date=date))
                try:
                    session.commit()
                except IntegrityError:
                    session.rollback()
                    logger.info("Word of day for %s already stored, keeping existing record", date)
                    existing = session.execute(select(WordOfDay).where(WordOfDay.date == date)).scalars().first()
                    return existing.to_record()
        except SQLAlchemyError as exc:
            logger.error("Failed to store word of day for %s: %s", date, exc)
            raise PersistenceFailure(str(exc)) from exc
        return record.model_copy(update={'date': date})

    def clear(self, date: str) -> bool:
        try:
            with self.Session() as session:
                result = session.execute(delete(WordOfDay).where(WordOfDay.date == date))
                session.commit()
                return result.rowcount > 0
        except SQLAlchemyError as exc:
            logger.error("Failed to clear word of day for %s: %s", date, exc)
            raise PersistenceFailure(str(exc)) from exc


class LeaderboardStore:
    def __init__(self, engine: Engine, limit: int = 5):
        self.Session = sessionmaker(bind=engine, expire_on_commit=False)
        self.limit = limit

    def get_top_scores(self, limit: Optional[int] = None) -> List[LeaderboardScore]:
        try:
            with self.Session() as session:
                stmt = select(Leaderboard).order_by(desc(Leaderboard.score), Leaderboard.id).limit(limit or self.limit)
                return [LeaderboardScore(name=r.name, score=r.score) for r in session.execute(stmt).scalars()]
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch leaderboard: %s", exc)
            raise PersistenceFailure(str(exc)) from exc

    def save_score(self, entry: LeaderboardEntry) -> LeaderboardEntry:
        try:
            with self.Session() as session:
                session.add(Leaderboard(name=entry.name, email=entry.email, score=entry.score))
                session.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to save score for %s: %s", entry.name, exc)
            raise PersistenceFailure(str(exc)) from exc
        return entry
