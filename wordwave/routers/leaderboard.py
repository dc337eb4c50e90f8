from __future__ import annotations
import asyncio
from typing import List

from fastapi import APIRouter, HTTPException, Request

from ..errors import PersistenceFailure
from ..schemas import LeaderboardEntry, LeaderboardScore

router = APIRouter(prefix='/api/leaderboard')


@router.get('', response_model=List[LeaderboardScore])
async def top_scores(request: Request):
    try:
        return await asyncio.to_thread(request.app.state.leaderboard.get_top_scores)
    except PersistenceFailure:
        raise HTTPException(status_code=500, detail='Error fetching leaderboard')


@router.post('', status_code=201)
async def save_score(request: Request, entry: LeaderboardEntry):
    try:
        await asyncio.to_thread(request.app.state.leaderboard.save_score, entry)
    except PersistenceFailure:
        raise HTTPException(status_code=500, detail='Error saving score')
    return {'message': 'Score saved successfully'}
