"""FastAPI entrypoint for the Wordhoard backend."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from app_state import WordhoardAppState
from errors import LookupFailed, StorageError, WordNotFound
from models import (
    DefinitionPayload,
    DeleteWordRequest,
    HourlyBucketPayload,
    HourlyStatsResponsePayload,
    IngestRequest,
    IngestResponsePayload,
    LimitsPayload,
    SetStarsRequest,
    SummaryResponsePayload,
    TrendPayload,
    WordPayload,
    WordsResponsePayload,
)

logger = logging.getLogger(__name__)

state = WordhoardAppState()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    state.start()
    logger.info("Wordhoard backend started")
    try:
        yield
    finally:
        state.stop()
        logger.info("Wordhoard backend stopped")


app = FastAPI(title="Wordhoard Backend", description="Vocabulary tracking backend API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _words_response(records) -> WordsResponsePayload:
    words = [WordPayload.from_record(record) for record in records]
    return WordsResponsePayload(words=words, total=len(words))


@app.get("/", tags=["health"])
async def root():
    return {"status": "ok", "message": "Wordhoard backend is running"}


@app.get("/health", tags=["health"])
async def health():
    services = state.current()
    return {
        "status": "ok",
        "message": "Wordhoard backend is running",
        "pipeline_busy": services.pipeline.busy,
        "watching_clipboard": bool(services.poller and services.poller.running),
    }


@app.get("/limits", response_model=LimitsPayload, tags=["health"])
async def limits():
    services = state.current()
    validator = services.words.validator
    return LimitsPayload(
        max_text_length=services.settings.max_text_length,
        min_word_length=validator.min_length,
        max_word_length=validator.max_length,
    )


@app.get("/words", response_model=WordsResponsePayload, tags=["words"])
async def list_words(starred: bool = False):
    try:
        return _words_response(state.current().words.list_words(starred_only=starred))
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/words/search", response_model=WordsResponsePayload, tags=["words"])
async def search_words(q: str = ""):
    try:
        return _words_response(state.current().words.search(q))
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/words/{word}", response_model=WordPayload, tags=["words"])
async def get_word(word: str):
    try:
        return WordPayload.from_record(state.current().words.get(word))
    except WordNotFound:
        raise HTTPException(status_code=404, detail="Word not found")
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/words/{word}/definition", response_model=DefinitionPayload, tags=["words"])
async def define_word(word: str):
    try:
        definition = await asyncio.to_thread(state.current().words.define, word)
        return DefinitionPayload(text=word.strip().lower(), definition=definition)
    except WordNotFound:
        raise HTTPException(status_code=404, detail="No definition found")
    except LookupFailed as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@app.get("/words/{word}/trend", response_model=TrendPayload, tags=["words"])
async def word_trend(word: str):
    try:
        trend = state.current().words.trend(word)
    except WordNotFound:
        raise HTTPException(status_code=404, detail="Word not found")
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return TrendPayload(
        text=trend.text,
        count=trend.count,
        days_since_first_seen=trend.days_since_first_seen,
        per_day=trend.per_day,
        label=trend.label,
    )


@app.post("/words/stars", response_model=WordPayload, tags=["words"])
async def set_stars(request: SetStarsRequest):
    try:
        record = state.current().words.set_stars(request.text, request.stars)
        return WordPayload.from_record(record)
    except WordNotFound:
        raise HTTPException(status_code=404, detail="Word not found")
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.post("/words/delete", tags=["words"])
async def delete_word(request: DeleteWordRequest):
    try:
        state.current().words.remove(request.text)
        return {"success": True, "text": request.text.lower()}
    except WordNotFound:
        raise HTTPException(status_code=404, detail="Word not found")
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.post("/words/clear", tags=["words"])
async def clear_words():
    try:
        removed = state.current().words.remove_all()
        return {"success": True, "removed": removed}
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/export", response_class=PlainTextResponse, tags=["words"])
async def export_words(starred: bool = False):
    try:
        return PlainTextResponse(state.current().words.export(starred_only=starred))
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/stats/hourly", response_model=HourlyStatsResponsePayload, tags=["stats"])
async def hourly_stats(hours: Optional[int] = Query(default=None, ge=0, le=24 * 7)):
    words = state.current().words
    window = words.default_window_hours if hours is None else hours
    try:
        buckets = await asyncio.to_thread(words.hourly, window)
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return HourlyStatsResponsePayload(
        hours=window,
        buckets=[HourlyBucketPayload(hour_start=b.hour_start, count=b.count) for b in buckets],
    )


@app.get("/stats/summary", response_model=SummaryResponsePayload, tags=["stats"])
async def summary_stats(top: int = Query(default=10, ge=0, le=100)):
    try:
        summary, top_words = state.current().words.summary(top)
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return SummaryResponsePayload(
        total=summary.total,
        starred=summary.starred,
        first_word_at=summary.first_word_at,
        top_words=[WordPayload.from_record(record) for record in top_words],
    )


@app.post("/ingest", response_model=IngestResponsePayload, tags=["pipeline"])
async def ingest(request: IngestRequest):
    words = state.current().words
    if not request.wait:
        return IngestResponsePayload(accepted=words.submit(request.text))
    try:
        result = await asyncio.to_thread(words.ingest, request.text)
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return IngestResponsePayload(
        accepted=True,
        candidates=sorted(result.candidates),
        confirmed=sorted(result.confirmed),
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = state.current().settings
    uvicorn.run(app, host=settings.host, port=settings.port)
