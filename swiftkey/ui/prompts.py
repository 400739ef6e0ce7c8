# swiftkey/ui/prompts.py

import logging
from typing import List, Optional

import inquirer

from swiftkey.models.errors import SnippetError
from swiftkey.models.models import ConfigSnippet, MenuItem, MergeStrategy
from swiftkey.services.snippets_api import SnippetsStore
from swiftkey.ui.display import console, print_error_message, render_snippet

logger = logging.getLogger(__name__)

STRATEGY_LABELS = {
    MergeStrategy.SMART: "Smart (replace matching items, rename clashing keys)",
    MergeStrategy.APPEND: "Append to the end",
    MergeStrategy.PREPEND: "Prepend to the start",
    MergeStrategy.REPLACE: "Replace the whole configuration",
}


def choose_snippet(snippets: List[ConfigSnippet], preselect_id: Optional[str] = None) -> Optional[ConfigSnippet]:
    if not snippets:
        return None
    choices = [(f"{snippet.name} ({snippet.author})", snippet.id) for snippet in snippets]
    questions = [
        inquirer.List(
            "snippet",
            message="Select a snippet:",
            choices=choices,
            default=preselect_id,
            carousel=True,
        )
    ]
    answers = inquirer.prompt(questions)
    if not answers:
        return None
    return next((s for s in snippets if s.id == answers["snippet"]), None)


def choose_merge_strategy() -> Optional[MergeStrategy]:
    questions = [
        inquirer.List(
            "strategy",
            message="How should the snippet be merged?",
            choices=[(label, strategy.value) for strategy, label in STRATEGY_LABELS.items()],
        )
    ]
    answers = inquirer.prompt(questions)
    if not answers:
        return None
    return MergeStrategy(answers["strategy"])


def get_confirmation(message: str = "Are you sure?", default: bool = False) -> bool:
    answers = inquirer.prompt([inquirer.Confirm("confirm", message=message, default=default)])
    return bool(answers and answers["confirm"])


def get_search_query() -> str:
    answers = inquirer.prompt([inquirer.Text("query", message="Search snippets (empty for all)")])
    return (answers or {}).get("query", "").strip()


def run_gallery(store: SnippetsStore, snippet_id: Optional[str] = None) -> Optional[List[MenuItem]]:
    """Interactive snippet gallery. Returns the merged configuration when something was imported."""
    snippets = store.fetch_snippets()
    if store.last_error is not None:
        console.print(f"Showing offline snippets ({store.last_error})", style="yellow")

    if snippet_id is None and snippets:
        snippets = store.search(get_search_query()) or snippets

    snippet = choose_snippet(snippets, snippet_id)
    if snippet is None:
        console.print("No snippet selected.", style="yellow")
        return None

    render_snippet(snippet)
    strategy = choose_merge_strategy()
    if strategy is None or not get_confirmation(f"Import '{snippet.name}' ({strategy.value})?"):
        console.print("Import cancelled.", style="yellow")
        return None

    try:
        merged = store.import_snippet(snippet, strategy)
    except SnippetError as e:
        logger.error("Snippet import failed: %s", e)
        print_error_message(e)
        return None
    console.print(f"Imported '{snippet.name}'.", style="green")
    return merged
