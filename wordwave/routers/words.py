from __future__ import annotations
import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request

from ..errors import PersistenceFailure
from ..schemas import Countdown, DictionaryResult, WordOfDayRecord

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get('/api/words/word-of-day', response_model=WordOfDayRecord)
async def word_of_day(request: Request):
    return await asyncio.to_thread(request.app.state.provider.get)


@router.delete('/api/words/word-of-day')
async def clear_word_of_day(request: Request):
    try:
        removed = await asyncio.to_thread(request.app.state.provider.clear)
    except PersistenceFailure:
        raise HTTPException(status_code=500, detail='Failed to clear word of the day')
    return {'message': 'Word of the day cleared successfully', 'removed': removed}


@router.get('/api/words/next-word', response_model=Countdown)
async def next_word(request: Request):
    return request.app.state.rollover.countdown()


@router.get('/api/words/test')
async def test_connection():
    return {'message': 'Word API is working!'}


# Dictionary validation REST endpoint
@router.get('/dict/validate', response_model=DictionaryResult)
async def validate_word(request: Request, word: str):
    result = await asyncio.to_thread(request.app.state.dictionary.lookup, word)
    return DictionaryResult(word=word.upper(), valid=bool(result.valid), definition=result.definition)
