"""Unified Rich theme and reusable UI helper functions for the CLI."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme
from rich.tree import Tree

STORY_THEME = Theme({
    "app.title": "bold",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "blue",
    "muted": "dim",
    "accent": "cyan",
    "genre": "bold",
    "stat.label": "dim",
    "stat.value": "bold",
    "order": "blue",
    "act.title": "bold cyan",
})


def get_console() -> Console:
    """Return a Console instance with the story theme applied."""
    return Console(theme=STORY_THEME)


def app_header(title: str = "storycrafter") -> Rule:
    """Return a Rule element for the application header banner."""
    return Rule(title=f"[bold]{title}[/]", style="dim")


def error_panel(error: dict) -> Panel:
    """Return a red-bordered Panel for an error envelope's ``error`` part."""
    body = f"  [stat.label]code:[/] [stat.value]{error.get('code', '?')}[/]\n  {error.get('message', '')}"
    return Panel(body, title="[error]Failed[/]", box=box.ROUNDED, border_style="red", padding=(0, 2))


def _short(text, limit: int) -> str:
    text = text or ""
    return (text[:limit] + "...") if len(text) > limit else text


def _by_order(items: list[dict]) -> list[dict]:
    return sorted(items, key=lambda item: (item.get("orderIndex") or 0, item.get("createdAt") or ""))


def operations_table(names: list[str]) -> Table:
    table = Table(title="Operations", box=box.ROUNDED, border_style="dim")
    table.add_column("Name", style="accent")
    for name in names:
        table.add_row(name)
    return table


def stories_table(stories: list[dict]) -> Table:
    """Build a Rich Table of story records in wire form."""
    table = Table(title="Stories", show_lines=True, border_style="dim")
    table.add_column("ID", style="muted")
    table.add_column("Title", style="bold")
    table.add_column("Genre", style="genre")
    table.add_column("Status")
    table.add_column("Logline")

    for s in stories:
        table.add_row(
            s["id"],
            s["title"],
            s.get("genre") or "",
            s.get("status") or "",
            _short(s.get("logline"), 50),
        )
    return table


def _scene_label(scene: dict) -> str:
    summary = scene.get("setting") or scene.get("goal") or scene.get("content") or ""
    return f"[order]#{scene['orderIndex']}[/] scene {_short(summary, 40)}"


def _chapter_branch(parent: Tree, chapter: dict, scenes: list[dict]) -> None:
    title = chapter.get("title") or "(untitled)"
    pov = f" [muted]POV: {chapter['povCharacter']}[/]" if chapter.get("povCharacter") else ""
    branch = parent.add(f"[order]#{chapter['orderIndex']}[/] {title}{pov}")
    for scene in _by_order([s for s in scenes if s.get("chapterId") == chapter["id"]]):
        branch.add(_scene_label(scene))


def outline_tree(title: str, acts: list[dict], chapters: list[dict], scenes: list[dict]) -> Tree:
    """Build a Rich Tree of acts → chapters → scenes, ordered by orderIndex.

    Chapters without an act and scenes without a chapter are grouped under
    their own branches at the end.
    """
    tree = Tree(f"[bold]{title}[/]")

    for act in _by_order(acts):
        act_title = act.get("title") or "(untitled act)"
        act_branch = tree.add(f"[order]#{act['orderIndex']}[/] [act.title]{act_title}[/]")
        for chapter in _by_order([c for c in chapters if c.get("actId") == act["id"]]):
            _chapter_branch(act_branch, chapter, scenes)

    loose_chapters = [c for c in chapters if not c.get("actId")]
    if loose_chapters:
        branch = tree.add("[muted]Chapters without an act[/]")
        for chapter in _by_order(loose_chapters):
            _chapter_branch(branch, chapter, scenes)

    loose_scenes = [s for s in scenes if not s.get("chapterId")]
    if loose_scenes:
        branch = tree.add("[muted]Scenes without a chapter[/]")
        for scene in _by_order(loose_scenes):
            branch.add(_scene_label(scene))

    return tree
