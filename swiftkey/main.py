# swiftkey/main.py
import argparse
import logging
import sys
from typing import List, Optional

from swiftkey.config import SETTINGS_FILE, Settings, load_settings
from swiftkey.container import DependencyContainer
from swiftkey.menu.parser import parse_menu
from swiftkey.menu.validation import collect_issues
from swiftkey.models.errors import ConfigError, SwiftKeyError
from swiftkey.navigation.deep_link import DeepLinkKind
from swiftkey.ui.display import ConsoleNotifier, console, print_error_message, render_issues
from swiftkey.ui.launcher import TerminalLauncher

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """Log to the configured file and to stdout."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        handlers.insert(0, logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="swiftkey", description="Keyboard-driven launcher menu.")
    parser.add_argument("--settings", default=SETTINGS_FILE, help="settings file (default: %(default)s)")
    parser.add_argument("--env-file", default=None, help=".env file with SWIFTKEY_* overrides")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="open the interactive menu (default)")

    validate = subparsers.add_parser("validate", help="check a menu file and list every problem")
    validate.add_argument("file", nargs="?", help="menu file (default: the configured one)")

    open_url = subparsers.add_parser("open", help="handle a swiftkey:// deep link")
    open_url.add_argument("url")

    snippets = subparsers.add_parser("snippets", help="browse and import configuration snippets")
    snippets.add_argument("--id", dest="snippet_id", default=None, help="preselect a snippet")

    export = subparsers.add_parser("export", help="write the current configuration to a file")
    export.add_argument("file")
    return parser


def validate_command(container: DependencyContainer, path: Optional[str]) -> int:
    try:
        target = path or str(container.config_manager.resolve_config_path())
        with open(target, "r", encoding="utf-8") as f:
            text = f.read()
        items = parse_menu(text, validate=False)
    except (OSError, ConfigError) as e:
        print_error_message(e)
        return 1

    issues = collect_issues(items)
    render_issues(issues)
    return 1 if any(issue.is_blocking for issue in issues) else 0


def run_command(container: DependencyContainer, args: argparse.Namespace) -> int:
    if args.command == "validate":
        return validate_command(container, args.file)

    container.start()
    launcher = TerminalLauncher(container)

    if args.command == "open":
        pending = container.deep_links.handle(args.url)
        container.controller.run_pending()
        result = pending.result()
        container.controller.wait_idle()
        console.print(f"Deep link: {result.kind.value}")
        return 1 if result.kind in (DeepLinkKind.IGNORED, DeepLinkKind.NOT_FOUND) else 0
    if args.command == "snippets":
        launcher.present_gallery(args.snippet_id)
        return 0
    if args.command == "export":
        container.config_manager.export_configuration(args.file)
        console.print(f"Exported configuration to {args.file}", style="green")
        return 0

    launcher.run()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.settings, args.env_file)
    setup_logging(settings)
    logger.info("Starting SwiftKey...")

    container = DependencyContainer(settings, notifier=ConsoleNotifier())
    try:
        return run_command(container, args)
    except SwiftKeyError as e:
        logger.error("Fatal error: %s", e, exc_info=True)
        print_error_message(e)
        return 1
    except KeyboardInterrupt:
        return 130
    finally:
        container.shutdown(wait=False)


if __name__ == "__main__":
    sys.exit(main())
