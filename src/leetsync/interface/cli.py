"""leetsync CLI: inspect and edit the completion table, run the agent server."""

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, TypeVar

import typer

from leetsync.application.config import AppConfig, resolve_config
from leetsync.domain.models import Difficulty, Record
from leetsync.interface.messages import MessageHandler

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="leetsync: keep completed coding problems in sync with the repetition service.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage leetsync configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    username: Annotated[
        str | None, typer.Option("--username", "-u", help="Act as this user.")
    ] = None,
    api_url: Annotated[str | None, typer.Option(help="Remote service base URL.")] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for leetsync."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"username": username, "api_url": api_url, "verbose": verbose}
    if verbose > 1:
        logging.getLogger("leetsync").setLevel(logging.DEBUG)


def _config(ctx: typer.Context, **extra: Any) -> AppConfig:
    overrides = dict((ctx.obj or {}).get("overrides", {}))
    overrides.update(extra)
    return resolve_config(overrides)


def _run(config: AppConfig, action: Callable[[MessageHandler], Awaitable[T]]) -> T:
    """Wire a handler from `config`, load the session, run `action`, release the client."""
    from leetsync.application.factory import get_remote_client, get_session_manager

    async def runner() -> T:
        async with get_remote_client(config) as client:
            handler = MessageHandler(
                get_session_manager(config, client),
                completion_window=timedelta(hours=config.completion_window_hours),
            )
            return await action(handler)

    return asyncio.run(runner())


def _print_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def table(
    ctx: typer.Context,
    as_json: Annotated[bool, typer.Option("--json", help="Print raw JSON.")] = False,
    due_only: Annotated[bool, typer.Option("--due", help="Only problems due now.")] = False,
):
    """[bold green]List[/bold green] completed problems in repeat-date order."""
    config = _config(ctx)

    async def action(handler: MessageHandler):
        info = await handler.get_user_info(should_refresh=True)
        if due_only and info.username:
            info.records = handler.sessions.session.cache.due()
        return info

    info = _run(config, action)
    if info.error:
        typer.secho(f"Error: {info.error}", fg="red", err=True)
        raise typer.Exit(1)
    if not info.username:
        typer.secho("No user signed in.", fg="yellow", err=True)
        raise typer.Exit(1)

    if as_json:
        _print_json(info.to_wire())
        return

    typer.echo(f"{info.username}: {len(info.records)} problems")
    for r in info.records:
        typer.echo(
            f"{r.repeat_date.date().isoformat()}  {r.difficulty.value:<6}  {r.id}  {r.link}"
        )


@app.command()
def complete(
    ctx: typer.Context,
    problem_id: Annotated[str, typer.Argument(help="Problem id (title slug).")],
    difficulty: Annotated[Difficulty, typer.Option(help="Problem difficulty.")],
    repeat_in: Annotated[
        int, typer.Option(help="Days until the problem should be repeated.")
    ] = 7,
    link: Annotated[str | None, typer.Option(help="Problem URL.")] = None,
):
    """[bold]Record[/bold] a problem as completed now."""
    config = _config(ctx)
    now = datetime.now(timezone.utc)
    record = Record(
        link=link or f"https://leetcode.com/problems/{problem_id}/",
        id=problem_id,
        difficulty=difficulty,
        repeat_date=now + timedelta(days=repeat_in),
        last_completion_date=now,
    )

    async def action(handler: MessageHandler):
        await handler.get_user_info()
        return await handler.problem_completed(record)

    result = _run(config, action)
    if not result.success:
        typer.secho(f"Error: {result.error}", fg="red", err=True)
        raise typer.Exit(1)
    typer.secho(f"Recorded {problem_id}, repeat on {record.repeat_date.date()}", fg="green")


@app.command()
def delete(
    ctx: typer.Context,
    problem_id: Annotated[str, typer.Argument(help="Problem id (title slug).")],
):
    """[bold red]Delete[/bold red] a completed problem."""
    config = _config(ctx)

    async def action(handler: MessageHandler):
        await handler.get_user_info()
        return await handler.delete_row(problem_id)

    result = _run(config, action)
    if not result.success:
        typer.secho(f"Error: {result.error}", fg="red", err=True)
        raise typer.Exit(1)
    typer.secho(f"Deleted {problem_id}", fg="green")


@app.command()
def check(
    ctx: typer.Context,
    problem_id: Annotated[str, typer.Argument(help="Problem id (title slug).")],
):
    """Check whether a problem was completed in the last day."""
    config = _config(ctx)

    async def action(handler: MessageHandler):
        await handler.get_user_info()
        return handler.check_completed_in_last_day(problem_id)

    result = _run(config, action)
    _print_json(result.to_wire())


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option(help="Bind address.")] = None,
    port: Annotated[int | None, typer.Option(help="Bind port.")] = None,
):
    """Run the agent server the browser extension talks to."""
    import uvicorn

    from leetsync.server import create_app

    config = _config(ctx, server_host=host, server_port=port)
    logger.info(f"Serving on http://{config.server_host}:{config.server_port}")
    uvicorn.run(create_app(config=config), host=config.server_host, port=config.server_port)


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Print the resolved configuration."""
    _print_json(_config(ctx).model_dump(mode="json"))


def main():
    app()


if __name__ == "__main__":
    main()
