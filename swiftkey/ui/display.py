# swiftkey/ui/display.py

from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from swiftkey.models.models import ConfigSnippet, KeyPressKind, KeyPressResult, NavigationState, ValidationIssue

console = Console(highlight=False)


def print_welcome_message(console: Console = console) -> None:
    console.print("Welcome to SwiftKey!", style="bold green")
    console.print("Press a key to pick an item, [bold]?[/bold] for help, Esc to quit.", style="dim")


def print_error_message(error, console: Console = console) -> None:
    console.print(f"Error: {error}", style="red")


def build_menu_table(state: NavigationState) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="bold cyan", no_wrap=True)
    table.add_column("icon", style="dim")
    table.add_column("title")
    for item in state.visible_menu:
        title = Text(item.title)
        if item.is_branch:
            title.append("  >", style="dim")
        elif item.is_dynamic:
            title.append("  ...", style="dim")
        table.add_row(item.key, item.default_icon, title)
    return table


def render_menu(state: NavigationState, console: Console = console) -> None:
    console.print(Panel(build_menu_table(state), title=state.breadcrumb_text, title_align="left", expand=False))


def render_help(state: NavigationState, console: Console = console) -> None:
    """List every item of the current level, hidden ones included."""
    table = Table(title=f"Keys in {state.breadcrumb_text}", show_lines=False)
    table.add_column("Key", style="bold cyan")
    table.add_column("Title")
    table.add_column("Action", style="dim")
    for item in state.current_menu:
        action = "submenu" if item.is_branch else (item.action or "")
        title = f"{item.title} (hidden)" if item.hidden else item.title
        table.add_row(item.key, title, action)
    table.add_row("?", "Help", "")
    table.add_row("backspace", "Up one level", "")
    table.add_row("esc", "Close", "")
    console.print(table)


def render_result(result: KeyPressResult, console: Console = console) -> None:
    if result.kind == KeyPressKind.ERROR:
        console.print(f"No item for key '{result.key}'", style="yellow")
    elif result.kind == KeyPressKind.LOADING:
        console.print(f"Loading '{result.key}'...", style="dim")
    elif result.kind == KeyPressKind.ACTION_EXECUTED:
        console.print("Done.", style="green")


def render_issues(issues: List[ValidationIssue], console: Console = console) -> None:
    if not issues:
        console.print("No problems found.", style="green")
        return
    table = Table(title="Validation issues")
    table.add_column("Severity")
    table.add_column("Item")
    table.add_column("Field", style="dim")
    table.add_column("Message")
    for issue in issues:
        style = "red" if issue.is_blocking else "yellow"
        table.add_row(Text(issue.severity.value, style=style), " > ".join(issue.path), issue.field, issue.message)
    console.print(table)


def snippet_dates(snippet: ConfigSnippet) -> str:
    parts = []
    if snippet.creation_date:
        parts.append(f"added {snippet.creation_date:%d %b %Y}")
    if snippet.update_date:
        parts.append(f"updated {snippet.update_date:%d %b %Y}")
    return ", ".join(parts)


def render_snippet(snippet: ConfigSnippet, console: Console = console) -> None:
    header = f"[bold]{snippet.name}[/bold] by {snippet.author}  [dim]{', '.join(snippet.tags)}[/dim]"
    subtitle = " - ".join(part for part in (snippet.description, snippet_dates(snippet)) if part)
    console.print(Panel(snippet.content, title=header, subtitle=subtitle, border_style="dim", expand=False))


class ConsoleNotifier:
    """Notification sink used by the action dispatcher."""

    def __init__(self, output: Optional[Console] = None):
        self.console = output if output is not None else console

    def __call__(self, title: str, message: str) -> None:
        self.console.print(Panel(message, title=title, border_style="blue", expand=False))
