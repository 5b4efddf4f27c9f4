"""CLI entry point — StoryCrafter story planning core.

Usage:
  storycrafter ops                         list operation names
  storycrafter -u alice run createStory '{"title": "Novel A"}'
  storycrafter -u alice stories            table of alice's stories
  storycrafter -u alice outline STORY_ID   act/chapter/scene tree
"""

import asyncio
import json
import logging
import sys

import click

from cli.theme import (
    app_header,
    error_panel,
    get_console,
    operations_table,
    outline_tree,
    stories_table,
)
from config.logging_config import setup_logging
from config.settings import Settings
from models.database import open_datastore
from services.dispatcher import OperationDispatcher, build_dispatcher
from services.identity import RequestContext

console = get_console()


def _init_logging(verbose: bool, settings: Settings):
    """Configure logging; console output only in verbose mode."""
    level = logging.DEBUG if verbose else settings.log_level_number
    setup_logging(level=level, log_dir=settings.log_dir, console_enabled=verbose)


class _Session:
    """Per-invocation state shared with subcommands."""

    def __init__(self, settings: Settings, user: str | None):
        self.settings = settings
        self.context = RequestContext.for_user(user)
        self._dispatcher: OperationDispatcher | None = None

    @property
    def dispatcher(self) -> OperationDispatcher:
        if self._dispatcher is None:
            self._dispatcher = build_dispatcher(open_datastore(self.settings))
        return self._dispatcher

    def dispatch(self, name: str, payload: dict | None = None) -> dict:
        return asyncio.run(self.dispatcher.dispatch(name, payload, self.context))


def _data_or_exit(envelope: dict) -> dict:
    if not envelope["success"]:
        console.print(error_panel(envelope["error"]))
        sys.exit(1)
    return envelope.get("data", {})


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--user", "-u", default=None, help="Act as this user id (defaults to STORYCRAFTER_DEFAULT_USER)")
@click.pass_context
def cli(ctx, verbose, user):
    """StoryCrafter — plan stories as acts, chapters and scenes."""
    settings = Settings()
    _init_logging(verbose, settings)
    ctx.obj = _Session(settings, user or settings.default_user)


# ---------------------------------------------------------------------------
# ops / run
# ---------------------------------------------------------------------------

@cli.command()
@click.pass_obj
def ops(session: _Session):
    """List the operations the dispatcher understands."""
    console.print(operations_table(session.dispatcher.operation_names()))


@cli.command()
@click.argument("operation")
@click.argument("payload", required=False, default=None)
@click.pass_obj
def run(session: _Session, operation, payload):
    """Run OPERATION with a JSON object PAYLOAD and print the envelope.

    Exits with status 1 when the envelope reports a failure.

    Example:
      storycrafter -u alice run createStoryAct '{"storyId": "...", "title": "Act I"}'
    """
    try:
        data = json.loads(payload) if payload else None
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="PAYLOAD")

    envelope = session.dispatch(operation, data)
    console.print_json(data=envelope)
    if not envelope["success"]:
        sys.exit(1)


# ---------------------------------------------------------------------------
# stories / outline
# ---------------------------------------------------------------------------

@cli.command()
@click.pass_obj
def stories(session: _Session):
    """Show the current user's stories."""
    data = _data_or_exit(session.dispatch("listStories"))

    console.print(app_header())
    if not data["items"]:
        console.print("[warning]No stories yet. Use [info]storycrafter run createStory[/] to add one.[/]")
        return
    console.print(stories_table(data["items"]))
    console.print(f"[muted]{data['total']} stor{'y' if data['total'] == 1 else 'ies'}[/]")


@cli.command()
@click.argument("story_id")
@click.pass_obj
def outline(session: _Session, story_id):
    """Show STORY_ID as a tree of acts, chapters and scenes."""
    scope = {"storyId": story_id}
    acts = _data_or_exit(session.dispatch("listStoryActs", scope))["items"]
    chapters = _data_or_exit(session.dispatch("listStoryChapters", scope))["items"]
    scenes = _data_or_exit(session.dispatch("listStoryScenes", scope))["items"]

    stories_data = _data_or_exit(session.dispatch("listStories"))
    title = next(
        (s["title"] for s in stories_data["items"] if s["id"] == story_id),
        story_id,
    )

    console.print(app_header())
    console.print(outline_tree(title, acts, chapters, scenes))


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
