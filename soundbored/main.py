import argparse
import sys

from dotenv import load_dotenv

from soundbored import __version__
from soundbored.catalog_service import CatalogClient
from soundbored.cli import (
    print_config,
    print_error,
    print_ok,
    print_search_results,
    print_status,
)
from soundbored.config import (
    DEFAULT_CONFIG_PATH,
    Config,
    ConfigStore,
    normalize_api_base_url,
    prompt_for_config,
)
from soundbored.errors import ConfigError, SoundboredError
from soundbored.logger import get_logger, init_logger
from soundbored.search import filter_exact, rank

logger = get_logger("main")


# ── Commands ─────────────────────────────────────────────────────────────────


def _run_interactive(store: ConfigStore, query: str) -> int:
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        print_error("This CLI requires an interactive terminal (TTY).")
        print("Please run soundbored directly in your terminal, not through pipes or redirects.")
        return 1

    try:
        config = store.ensure()
    except ConfigError as e:
        print_error(str(e))
        return 1

    import curses

    from soundbored.interaction import InteractionLoop
    from soundbored.tui import CursesTUI

    tui = CursesTUI()
    loop = InteractionLoop(CatalogClient(config), on_change=tui.render)
    try:
        tui.run(loop, query)
    except curses.error as e:
        logger.error(f"Curses failure: {e}")
        print_error(f"Failed to start the interactive UI: {e}")
        return 1

    if loop.load_error is not None:
        print_error(loop.load_error)
        return 1
    return 0


def _run_search(store: ConfigStore, query: str, exact: bool) -> int:
    try:
        client = CatalogClient(store.ensure())
        print_status("Fetching sounds...")
        sounds = client.fetch_sounds()
    except SoundboredError as e:
        print_error(str(e))
        return 1

    print_ok(f"Loaded {len(sounds)} sounds")
    results = filter_exact(query, sounds) if exact else rank(query, sounds)
    print_search_results(results, query)
    return 0


def _run_config(store: ConfigStore, args: argparse.Namespace) -> int:
    try:
        current = store.load() or store.ensure()

        if args.show:
            print_config(current, store.path)
            return 0

        if args.api is not None or args.token is not None:
            api_base_url = current.api_base_url
            token = current.token
            if args.api is not None:
                if not args.api.strip().startswith("http"):
                    raise ConfigError(f"Invalid base URL: {args.api}")
                api_base_url = normalize_api_base_url(args.api)
            if args.token is not None:
                if not args.token.strip():
                    raise ConfigError("Token is required")
                token = args.token.strip()
            store.save(Config(api_base_url=api_base_url, token=token))
            print_ok("Configuration updated")
            return 0

        store.save(prompt_for_config(default=current))
        print_ok("Configuration saved")
        return 0
    except ConfigError as e:
        print_error(str(e))
        return 1


# ── Entry point ──────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="soundbored",
        description="Fuzzy search and play sounds from a Soundbored server",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to the config file (default: %(default)s)",
    )
    parser.add_argument(
        "-l",
        "--log",
        type=str,
        default=None,
        help="Enable logging to file (e.g., -l run.log)",
    )

    sub = parser.add_subparsers(dest="command")

    interactive = sub.add_parser("interactive", help="Search and play sounds interactively")
    interactive.add_argument("query", nargs="?", default="", help="Initial search query")

    search = sub.add_parser("search", help="Print sounds matching a query")
    search.add_argument("query", nargs="?", default="", help="Search query (optional)")
    search.add_argument(
        "--exact",
        action="store_true",
        help="Substring match on filename and tags instead of fuzzy ranking",
    )

    config = sub.add_parser("config", help="View or update stored API config")
    config.add_argument("--show", action="store_true", help="Show current configuration")
    config.add_argument("--api", metavar="URL", default=None, help="Set base URL")
    config.add_argument("--token", default=None, help="Set API token")

    return parser


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = build_parser().parse_args(argv)

    init_logger(args.log)
    store = ConfigStore(args.config)

    if args.command == "search":
        code = _run_search(store, args.query, args.exact)
    elif args.command == "config":
        code = _run_config(store, args)
    else:
        code = _run_interactive(store, getattr(args, "query", ""))

    sys.exit(code)


if __name__ == "__main__":
    main()
