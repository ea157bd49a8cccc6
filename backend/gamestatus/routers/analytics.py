"""Player analytics router: per-player records and table summary."""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from gamestatus import config
from gamestatus.analytics_db import AnalyticsError, AnalyticsStore
from gamestatus.models import ErrorMessagesResponse, SummaryResponse
from gamestatus.validation import InputValidationError, validate_player_query

router = APIRouter(tags=["analytics"])


def get_analytics_store(request: Request) -> AnalyticsStore:
    return request.app.state.analytics_store


@router.get("/player")
async def get_player(
    steamid: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    store: AnalyticsStore = Depends(get_analytics_store),
):
    try:
        steam_id, bounded_limit = validate_player_query(steamid, limit)
    except InputValidationError as exc:
        body = ErrorMessagesResponse(errorMessages=exc.errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=body.model_dump(mode="json", by_alias=True),
        )

    bounded_limit = min(bounded_limit, config.ANALYTICS_MAX_LIMIT)
    try:
        return await asyncio.to_thread(store.player_records, steam_id, bounded_limit)
    except AnalyticsError as exc:
        return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(store: AnalyticsStore = Depends(get_analytics_store)):
    try:
        return await asyncio.to_thread(store.summary)
    except AnalyticsError as exc:
        return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)
