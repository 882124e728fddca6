"""flashdeck CLI: study, inspect and manage spaced-repetition progress."""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from flashdeck.application.config import AppConfig, resolve_config
from flashdeck.domain.errors import FlashdeckError

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="flashdeck: SM-2 flashcard scheduler.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage flashdeck configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

RATING_KEYS = {"1": "again", "2": "hard", "3": "good", "4": "easy"}


def _now() -> datetime:
    """Local wall-clock time; the only place the CLI reads the clock."""
    return datetime.now().astimezone()


def _config(ctx: typer.Context, **overrides) -> AppConfig:
    overrides.update(ctx.obj.get("overrides", {}) if ctx.obj else {})
    config = resolve_config(overrides)
    logging.getLogger("flashdeck").setLevel(config.log_level)
    return config


def _fail(err: Exception) -> NoReturn:
    typer.secho(str(err), fg="red", err=True)
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Directory holding card set CSV files.")
    ] = None,
    state_file: Annotated[
        Path | None, typer.Option("--state-file", help="JSON file holding study progress.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."),
    ] = 0,
):
    """Global settings for flashdeck."""
    ctx.ensure_object(dict)
    overrides: dict = {"data_dir": data_dir, "state_file": state_file}
    if verbose >= 2:
        overrides["log_level"] = "DEBUG"
    elif verbose == 1:
        overrides["log_level"] = "INFO"
    ctx.obj["overrides"] = {k: v for k, v in overrides.items() if v is not None}


# ---------------------------------------------------------------------------
# Card sets
# ---------------------------------------------------------------------------


@app.command("sets")
def list_sets(ctx: typer.Context):
    """List available card sets."""
    from flashdeck.application.factory import get_card_source

    config = _config(ctx)
    for info in get_card_source(config).list_card_sets():
        line = f"{info.id:<24} {info.total_cards:>5} cards  {info.name}"
        if info.description:
            line += f"  ({info.description})"
        typer.echo(line)


@app.command("due")
def due(
    ctx: typer.Context,
    card_set: Annotated[str, typer.Argument(help="Card set id.")],
    limit: Annotated[int | None, typer.Option(help="Show at most this many cards.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show the cards due now, in study order."""
    from flashdeck.application.factory import get_card_source, get_state_store
    from flashdeck.application.queue_builder import build_study_queue, days_overdue

    config = _config(ctx)
    now = _now()
    try:
        cards = get_card_source(config).load_cards(card_set)
    except FlashdeckError as e:
        _fail(e)

    queue = build_study_queue(card_set, cards, get_state_store(config), now, limit=limit)
    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": e.card_id,
                        "question": e.card.question if e.card else None,
                        "daysOverdue": days_overdue(e.state, now.date()),
                        **e.state.to_dict(),
                    }
                    for e in queue
                ],
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    if not queue:
        typer.secho("No cards due. Come back tomorrow.", fg="green")
        return
    typer.echo(f"{len(queue)} cards due in {card_set}:")
    for entry in queue:
        overdue = days_overdue(entry.state, now.date())
        question = entry.card.question if entry.card else entry.card_id
        typer.echo(f"  [{overdue:+d}d ease {entry.state.ease_factor or 0:.2f}] {question}")


@app.command("review")
def review(
    ctx: typer.Context,
    card_set: Annotated[str, typer.Argument(help="Card set id.")],
    limit: Annotated[
        int | None, typer.Option(help="Cards per session. Defaults to config.")
    ] = None,
):
    """[bold green]Study[/bold green] the due cards of a card set."""
    from flashdeck.application.factory import get_card_source, get_state_store
    from flashdeck.application.scheduler import format_interval, preview_intervals
    from flashdeck.application.session import StudySession
    from flashdeck.application.stats.history import prune_history, record_session

    config = _config(ctx)
    store = get_state_store(config)
    try:
        cards = get_card_source(config).load_cards(card_set)
    except FlashdeckError as e:
        _fail(e)

    session = StudySession.start(
        card_set, cards, store, _now(), limit=limit or config.cards_per_session
    )
    if session.finished:
        typer.secho("All cards have been studied for today. Come back tomorrow.", fg="green")
        return

    total = len(session.entries)
    while not session.finished:
        entry = session.current
        card = entry.card
        typer.echo(f"\n[{session.position + 1}/{total}] {card.question if card else entry.card_id}")
        if card and card.hint:
            typer.secho(f"Hint: {card.hint}", fg="cyan")
        typer.prompt("Press Enter to show the answer", default="", show_default=False)
        typer.secho(card.answer if card else "", bold=True)

        previews = preview_intervals(store.get_state(card_set, entry.card_id, _now()), _now())
        choices = "  ".join(
            f"{key}) {rating.value} ({format_interval(previews[rating])})"
            for key, rating in zip(RATING_KEYS, previews)
        )
        typer.echo(choices)

        answer = typer.prompt("Rating (1-4, q to stop)").strip().lower()
        if answer in {"q", "quit"}:
            break
        try:
            new_state = session.answer(RATING_KEYS.get(answer, answer), _now())
        except FlashdeckError as e:
            typer.secho(str(e), fg="yellow")
            continue
        typer.echo(f"Next review: {new_state.due_date.isoformat()}")

    now = _now()
    summary = session.summary(now)
    if summary.cards_studied:
        history = record_session(store.get_history(), summary, now.date())
        store.save_history(prune_history(history, now.date()))

    typer.secho("\nSession completed!", fg="green")
    typer.echo(f"Total cards: {summary.cards_studied}")
    typer.echo(f"Correct answers: {summary.correct_answers}")
    typer.echo(f"Errors: {summary.wrong_answers}")
    typer.echo(f"Accuracy: {summary.accuracy}%")
    typer.echo(f"Average interval: {summary.average_interval} days")
    typer.echo(f"Time: {round(summary.time_spent_seconds / 60)} min")


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


@app.command("stats")
def stats(
    ctx: typer.Context,
    card_set: Annotated[str, typer.Argument(help="Card set id.")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show maturity counts, averages and due counts for a card set."""
    from dataclasses import asdict

    from flashdeck.application.factory import get_card_source, get_state_store
    from flashdeck.application.stats.service import DeckStatsService

    config = _config(ctx)
    service = DeckStatsService(get_state_store(config), get_card_source(config))
    try:
        result = service.statistics(card_set, _now())
    except FlashdeckError as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
        return

    typer.echo(f"Total: {result.total_cards}")
    typer.echo(
        f"New: {result.new_cards}  Learning: {result.learning_cards}  "
        f"Review: {result.review_cards}  Mature: {result.mature_cards}"
    )
    typer.echo(f"Average ease: {result.average_ease}  Average interval: {result.average_interval}d")
    typer.echo(f"Due today: {result.due_today}  Overdue: {result.overdue}")


@app.command("forecast")
def forecast(
    ctx: typer.Context,
    card_set: Annotated[str, typer.Argument(help="Card set id.")],
    days: Annotated[int | None, typer.Option(help="Days to forecast. Defaults to config.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show how many cards fall due on each upcoming day."""
    from flashdeck.application.factory import get_card_source, get_state_store
    from flashdeck.application.stats.service import DeckStatsService

    config = _config(ctx)
    service = DeckStatsService(get_state_store(config), get_card_source(config))
    days = days if days is not None else config.forecast_days
    try:
        result = service.forecast(card_set, _now(), days)
    except (FlashdeckError, ValueError) as e:
        _fail(e)

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "date": day.date.isoformat(),
                        "new_count": day.new_count,
                        "review_count": day.review_count,
                        "card_count": day.card_count,
                    }
                    for day in result
                ],
                indent=2,
            )
        )
        return

    for day in result:
        typer.echo(
            f"{day.date.isoformat()} {day.date.strftime('%a')}  "
            f"{day.card_count:>4} ({day.new_count} new, {day.review_count} review)"
        )


@app.command("plan")
def plan(
    ctx: typer.Context,
    card_set: Annotated[str, typer.Argument(help="Card set id.")],
    minutes: Annotated[float | None, typer.Option(help="Available study minutes.")] = None,
    seconds_per_card: Annotated[
        float | None, typer.Option(help="Average seconds spent per card.")
    ] = None,
):
    """Recommend a session that fits the available time."""
    from flashdeck.application.factory import get_card_source, get_state_store
    from flashdeck.application.stats.service import DeckStatsService

    config = _config(
        ctx, available_minutes=minutes, avg_seconds_per_card=seconds_per_card
    )
    service = DeckStatsService(get_state_store(config), get_card_source(config))
    try:
        result = service.plan_session(
            card_set, _now(), config.available_minutes, config.avg_seconds_per_card
        )
    except FlashdeckError as e:
        _fail(e)

    typer.echo(
        f"Recommended: {result.total_cards} cards (~{result.estimated_minutes} min, "
        f"capacity {result.max_cards})"
    )
    typer.echo(
        f"Overdue: {result.breakdown.overdue}  New: {result.breakdown.new}  "
        f"Review: {result.breakdown.review}"
    )


# ---------------------------------------------------------------------------
# Progress management
# ---------------------------------------------------------------------------


@app.command("reset")
def reset(
    ctx: typer.Context,
    card_set: Annotated[str, typer.Argument(help="Card set id.")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass confirmation.")
    ] = False,
):
    """Forget all progress for a card set."""
    from flashdeck.application.factory import get_state_store

    config = _config(ctx)
    if not force and not typer.confirm(f"Reset all progress for '{card_set}'?"):
        raise typer.Exit(1)
    get_state_store(config).reset_card_set(card_set)
    typer.secho(f"Progress for '{card_set}' was reset.", fg="green")


@app.command("export")
def export_progress(
    ctx: typer.Context,
    output: Annotated[
        Path | None, typer.Argument(help="Write to this file instead of stdout.")
    ] = None,
):
    """Export all study progress as JSON."""
    from flashdeck.application.factory import get_state_store

    config = _config(ctx)
    payload = get_state_store(config).export_data(_now())
    if output is None:
        typer.echo(payload)
    else:
        output.write_text(payload, encoding="utf-8")
        typer.secho(f"Exported progress to {output}", fg="green")


@app.command("import")
def import_progress(
    ctx: typer.Context,
    source: Annotated[Path, typer.Argument(help="File produced by 'flashdeck export'.")],
):
    """Replace all study progress with an exported file."""
    from flashdeck.application.factory import get_state_store

    config = _config(ctx)
    try:
        get_state_store(config).import_data(source.read_text(encoding="utf-8"))
    except (FlashdeckError, OSError) as e:
        _fail(e)
    typer.secho(f"Imported progress from {source}", fg="green")


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@app.command("serve")
def serve(
    ctx: typer.Context,
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API."""
    import uvicorn

    config = _config(ctx, port=port, host=host)
    # The server resolves its own config; hand CLI paths over through the environment.
    for key in ("data_dir", "state_file", "log_level"):
        os.environ[f"FLASHDECK_{key.upper()}"] = str(getattr(config, key))
    uvicorn.run("flashdeck.server:app", host=config.host, port=config.port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _config(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main():
    app()
