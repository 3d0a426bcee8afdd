import logging
import os
from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .database import JournalDatabase, get_session
from .errors import EntryNotFoundError, ExportRenderError
from .models import JournalEntry as JournalEntryRecord
from .repositories import JournalEntryRepository
from .schemas import (
    ExportRequest,
    ExportResult,
    JournalEntry,
    JournalEntryWrite,
    JournalStats,
    ThemeStatus,
)
from .services.analytics import JournalAnalytics
from .services.export import export_entries_pdf
from .theme import ThemeState

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="Journify API")
app.state.theme = ThemeState()

entries = JournalEntryRepository()

cors_origins = [origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if origin.strip()]
if cors_origins:
    allow_all = "*" in cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else cors_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.on_event("startup")
async def startup() -> None:
    database = JournalDatabase()
    await database.startup()
    app.state.database = database


@app.on_event("shutdown")
async def shutdown() -> None:
    database = getattr(app.state, "database", None)
    if database is not None:
        await database.shutdown()


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    LOGGER.exception("Journal storage failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Journal storage failure"})


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise HTTPException(status_code=400, detail="Range end is before range start")


async def _get_or_404(session: AsyncSession, entry_id: int) -> JournalEntryRecord:
    entry = await entries.get(session, entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Journal entry not found")
    return entry


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/v1/journal/entries", response_model=list[JournalEntry])
async def list_entries(
    skip: int = Query(0, ge=0),
    limit: int | None = Query(default=None, ge=1),
    session: AsyncSession = Depends(get_session),
):
    if limit is None:
        return await entries.get_all(session)
    return await entries.get_paged(session, skip, limit)


@app.post("/v1/journal/entries", response_model=JournalEntry, status_code=201)
async def create_entry(
    request: JournalEntryWrite,
    session: AsyncSession = Depends(get_session),
):
    entry = JournalEntryRecord(**request.model_dump())
    return await entries.save(session, entry)


@app.get("/v1/journal/entries/by-date/{day}", response_model=JournalEntry)
async def get_entry_by_date(
    day: date,
    session: AsyncSession = Depends(get_session),
):
    entry = await entries.get_by_date(session, day)
    if entry is None:
        raise HTTPException(status_code=404, detail="No journal entry for this day")
    return entry


@app.get("/v1/journal/entries/range", response_model=list[JournalEntry])
async def list_entries_in_range(
    start: date = Query(...),
    end: date = Query(...),
    session: AsyncSession = Depends(get_session),
):
    _check_range(start, end)
    return await entries.get_by_range(session, start, end)


@app.get("/v1/journal/entries/{entry_id}", response_model=JournalEntry)
async def get_entry(
    entry_id: int,
    session: AsyncSession = Depends(get_session),
):
    return await _get_or_404(session, entry_id)


@app.put("/v1/journal/entries/{entry_id}", response_model=JournalEntry)
async def update_entry(
    entry_id: int,
    request: JournalEntryWrite,
    session: AsyncSession = Depends(get_session),
):
    entry = JournalEntryRecord(id=entry_id, **request.model_dump())
    try:
        return await entries.save(session, entry)
    except EntryNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Journal entry not found") from exc


@app.delete("/v1/journal/entries/{entry_id}", status_code=204)
async def delete_entry(
    entry_id: int,
    session: AsyncSession = Depends(get_session),
):
    entry = await _get_or_404(session, entry_id)
    try:
        await entries.delete(session, entry)
    except EntryNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Journal entry not found") from exc


def get_today() -> date:
    return date.today()


@app.get("/v1/journal/stats", response_model=JournalStats)
async def journal_stats(
    today: date = Depends(get_today),
    session: AsyncSession = Depends(get_session),
):
    summary = await JournalAnalytics(session, entries).summary(today=today)
    return JournalStats(
        current_streak=summary.current_streak,
        longest_streak=summary.longest_streak,
        missed_in_last_30_days=summary.missed_in_last_30_days,
        total_words=summary.total_words,
    )


@app.post("/v1/journal/export", response_model=ExportResult)
async def export_journal(
    request: ExportRequest,
    session: AsyncSession = Depends(get_session),
):
    _check_range(request.start, request.end)
    try:
        path = await export_entries_pdf(
            session, request.start, request.end, repository=entries
        )
    except ExportRenderError as exc:
        LOGGER.exception("Journal export failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return ExportResult(path=path)


@app.get("/v1/theme", response_model=ThemeStatus)
async def get_theme():
    theme: ThemeState = app.state.theme
    return ThemeStatus(is_dark_mode=theme.is_dark_mode, theme_class=theme.theme_class)


@app.post("/v1/theme/toggle", response_model=ThemeStatus)
async def toggle_theme():
    theme: ThemeState = app.state.theme
    theme.toggle()
    return ThemeStatus(is_dark_mode=theme.is_dark_mode, theme_class=theme.theme_class)
