import logging
import time
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from flashdeck.application import scheduler
from flashdeck.application.config import AppConfig, resolve_config
from flashdeck.application.factory import get_card_source
from flashdeck.application.queue_builder import build_study_queue, days_overdue
from flashdeck.application.stats.service import DeckStatsService
from flashdeck.consts import VERSION
from flashdeck.domain.errors import CardSetNotFound, InvalidRating
from flashdeck.domain.models import Rating
from flashdeck.domain.ports import CardSource, CardStateStore
from flashdeck.infrastructure.adapters.state_store import JsonStateStore

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("flashdeck.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"flashdeck server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("flashdeck server shutting down...")


app = FastAPI(
    title="flashdeck",
    description="Spaced-repetition scheduling API for flashcard study.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return resolve_config()


@lru_cache(maxsize=8)
def _store_for(state_file: Path) -> CardStateStore:
    return JsonStateStore(state_file)


def get_store(config: AppConfig = Depends(get_config)) -> CardStateStore:
    # One store per state file for the whole process, shared by all requests.
    return _store_for(config.state_file)


def get_source(config: AppConfig = Depends(get_config)) -> CardSource:
    return get_card_source(config)


def get_clock() -> datetime:
    return datetime.now().astimezone()


@app.exception_handler(CardSetNotFound)
async def card_set_not_found_handler(request: Request, exc: CardSetNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class CardSetResponse(BaseModel):
    id: str
    name: str
    total_cards: int
    description: str | None = None


class CardStateResponse(BaseModel):
    interval: float
    ease_factor: float | None
    repetitions: int
    due_date: date
    created_at: datetime
    last_reviewed: datetime | None
    total_reviews: int
    correct_reviews: int


class DueCardResponse(BaseModel):
    id: str
    question: str | None
    answer: str | None
    days_overdue: int
    state: CardStateResponse


class ReviewRequest(BaseModel):
    rating: str


class IntervalsResponse(BaseModel):
    again: float
    hard: float
    good: float
    easy: float
    labels: dict[str, str]


class StatisticsResponse(BaseModel):
    total_cards: int
    new_cards: int
    learning_cards: int
    review_cards: int
    mature_cards: int
    average_ease: float
    average_interval: float
    due_today: int
    overdue: int


class ForecastDayResponse(BaseModel):
    day: date = Field(serialization_alias="date")
    new_count: int
    review_count: int
    card_count: int


class SessionPlanResponse(BaseModel):
    card_ids: list[str]
    total_cards: int
    max_cards: int
    estimated_minutes: int
    breakdown: dict[str, int]


def _require_card(source: CardSource, card_set_id: str, card_id: str) -> None:
    """Raise 404 unless the set exists and contains the card."""
    cards = source.load_cards(card_set_id)
    if not any(card.id == card_id for card in cards):
        raise HTTPException(status_code=404, detail=f"Card not found: {card_set_id}/{card_id}")


def _state_response(state) -> CardStateResponse:
    return CardStateResponse(
        interval=state.interval,
        ease_factor=state.ease_factor,
        repetitions=state.repetitions,
        due_date=state.due_date,
        created_at=state.created_at,
        last_reviewed=state.last_reviewed,
        total_reviews=state.total_reviews,
        correct_reviews=state.correct_reviews,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/sets", response_model=list[CardSetResponse])
def list_sets(source: CardSource = Depends(get_source)):
    return [
        CardSetResponse(
            id=info.id, name=info.name, total_cards=info.total_cards, description=info.description
        )
        for info in source.list_card_sets()
    ]


@app.get("/sets/{card_set_id}/due", response_model=list[DueCardResponse])
def due_cards(
    card_set_id: str,
    limit: int | None = None,
    store: CardStateStore = Depends(get_store),
    source: CardSource = Depends(get_source),
    now: datetime = Depends(get_clock),
):
    """Due cards of a set in study order."""
    cards = source.load_cards(card_set_id)
    queue = build_study_queue(card_set_id, cards, store, now, limit=limit)
    return [
        DueCardResponse(
            id=entry.card_id,
            question=entry.card.question if entry.card else None,
            answer=entry.card.answer if entry.card else None,
            days_overdue=days_overdue(entry.state, now.date()),
            state=_state_response(entry.state),
        )
        for entry in queue
    ]


@app.get("/sets/{card_set_id}/cards/{card_id}/intervals", response_model=IntervalsResponse)
def card_intervals(
    card_set_id: str,
    card_id: str,
    store: CardStateStore = Depends(get_store),
    source: CardSource = Depends(get_source),
    now: datetime = Depends(get_clock),
):
    """Interval each rating would schedule, for answer button labels."""
    _require_card(source, card_set_id, card_id)
    previews = scheduler.preview_intervals(store.get_state(card_set_id, card_id, now), now)
    return IntervalsResponse(
        **{rating.value: days for rating, days in previews.items()},
        labels={rating.value: scheduler.format_interval(d) for rating, d in previews.items()},
    )


@app.post("/sets/{card_set_id}/cards/{card_id}/review", response_model=CardStateResponse)
def review_card(
    card_set_id: str,
    card_id: str,
    req: ReviewRequest,
    store: CardStateStore = Depends(get_store),
    source: CardSource = Depends(get_source),
    now: datetime = Depends(get_clock),
):
    """Apply a rating to a card and persist the new state."""
    _require_card(source, card_set_id, card_id)
    try:
        rating = Rating.parse(req.rating)
    except InvalidRating as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    new_state = scheduler.update(store.get_state(card_set_id, card_id, now), rating, now)
    store.set_state(card_set_id, card_id, new_state)
    logger.info(f"Reviewed {card_set_id}/{card_id} as {rating.value}, due {new_state.due_date}")
    return _state_response(new_state)


@app.get("/sets/{card_set_id}/stats", response_model=StatisticsResponse)
def card_set_statistics(
    card_set_id: str,
    store: CardStateStore = Depends(get_store),
    source: CardSource = Depends(get_source),
    now: datetime = Depends(get_clock),
):
    result = DeckStatsService(store, source).statistics(card_set_id, now)
    return StatisticsResponse(**asdict(result))


@app.get("/sets/{card_set_id}/forecast", response_model=list[ForecastDayResponse])
def card_set_forecast(
    card_set_id: str,
    days: int = 7,
    store: CardStateStore = Depends(get_store),
    source: CardSource = Depends(get_source),
    now: datetime = Depends(get_clock),
):
    if days < 0 or days > 365:
        raise HTTPException(status_code=422, detail="days must be between 0 and 365")
    result = DeckStatsService(store, source).forecast(card_set_id, now, days)
    return [
        ForecastDayResponse(
            day=day.date,
            new_count=day.new_count,
            review_count=day.review_count,
            card_count=day.card_count,
        )
        for day in result
    ]


@app.get("/sets/{card_set_id}/plan", response_model=SessionPlanResponse)
def card_set_plan(
    card_set_id: str,
    minutes: float | None = None,
    seconds_per_card: float | None = None,
    config: AppConfig = Depends(get_config),
    store: CardStateStore = Depends(get_store),
    source: CardSource = Depends(get_source),
    now: datetime = Depends(get_clock),
):
    try:
        plan = DeckStatsService(store, source).plan_session(
            card_set_id,
            now,
            minutes if minutes is not None else config.available_minutes,
            seconds_per_card if seconds_per_card is not None else config.avg_seconds_per_card,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return SessionPlanResponse(
        card_ids=[entry.card_id for entry in plan.cards],
        total_cards=plan.total_cards,
        max_cards=plan.max_cards,
        estimated_minutes=plan.estimated_minutes,
        breakdown={
            "overdue": plan.breakdown.overdue,
            "new": plan.breakdown.new,
            "review": plan.breakdown.review,
        },
    )
