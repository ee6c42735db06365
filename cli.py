"""
`so` command-line entry point: search StackExchange from the terminal.
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import List, Optional

import httpx
from dotenv import load_dotenv

from models.errors import SoError
from models.schema import Config, Question
from settings.resolver import ConfigOverrides, Resolution, resolve_config, toggle_from_flags
from settings.store import load_user_config, set_api_key
from stackexchange.client import StackExchange
from stackexchange.storage import SiteRegistry

logger = logging.getLogger(__name__)


@dataclass
class Opts:
    """Parsed invocation: administrative actions, query and resolved settings."""

    list_sites: bool
    update_sites: bool
    query: Optional[str]
    resolution: Resolution

    @property
    def config(self) -> Config:
        return self.resolution.config


# ------------------------------------------------------------------
# Output helpers
# ------------------------------------------------------------------

def print_error(message: str):
    print(f"✖ {message}", file=sys.stderr)


def print_notice(message: str):
    print(f"➜ {message}", file=sys.stderr)


def print_success(message: str):
    print(f"✔ {message}", file=sys.stderr)


def print_warn(message: str):
    print(f"⚡ {message}", file=sys.stderr)


# ------------------------------------------------------------------
# Argument parsing
# ------------------------------------------------------------------

def build_parser(config: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="so",
        description="Search StackExchange from the terminal",
    )
    parser.add_argument("--list-sites", action="store_true", help="Print available StackExchange sites")
    parser.add_argument("--update-sites", action="store_true", help="Update cache of StackExchange sites")
    parser.add_argument("--set-api-key", metavar="KEY", help="Set StackExchange API key")
    parser.add_argument(
        "-s", "--site",
        action="append",
        metavar="SITE",
        help=f"StackExchange site code to search (default: {';'.join(config.sites)})",
    )
    parser.add_argument("-l", "--limit", help=f"Question limit (default: {config.limit})")

    lucky = parser.add_mutually_exclusive_group()
    lucky.add_argument("--lucky", action="store_true", help="Print the top-voted answer of the most relevant question")
    lucky.add_argument(
        "--no-lucky",
        action="store_true",
        help="Disable lucky" if config.lucky else argparse.SUPPRESS,
    )

    ddg = parser.add_mutually_exclusive_group()
    ddg.add_argument("--duckduckgo", action="store_true", help="Use DuckDuckGo as a search engine")
    ddg.add_argument(
        "--no-duckduckgo",
        action="store_true",
        help="Disable duckduckgo" if config.duckduckgo else argparse.SUPPRESS,
    )

    parser.add_argument("query", nargs="*", help="Search query")
    return parser


def get_opts(argv: Optional[List[str]] = None, persisted: Optional[Config] = None) -> Opts:
    """
    Parse argv against the persisted settings.

    Raises:
        ConfigError: On an invalid limit or site override
    """
    persisted = persisted if persisted is not None else load_user_config()
    parser = build_parser(persisted)
    args = parser.parse_args(argv)

    if not args.query and not (args.list_sites or args.update_sites or args.set_api_key is not None):
        parser.error("a search query is required unless --list-sites, --update-sites or --set-api-key is given")

    overrides = ConfigOverrides(
        sites=args.site,
        limit=args.limit,
        api_key=args.set_api_key,
        lucky=toggle_from_flags(args.lucky, args.no_lucky, "lucky"),
        duckduckgo=toggle_from_flags(args.duckduckgo, args.no_duckduckgo, "duckduckgo"),
    )
    return Opts(
        list_sites=args.list_sites,
        update_sites=args.update_sites,
        query=" ".join(args.query) if args.query else None,
        resolution=resolve_config(persisted, overrides),
    )


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------

def print_questions(questions: List[Question], lucky: bool):
    if lucky:
        top = questions[0]
        if not top.answers:
            print_notice("The most relevant question has no answers.")
            return
        print(top.answers[0].body)
        return

    for q in questions:
        print(f"# {q.title} ({q.score})")
        print()
        print(q.body)
        for a in q.answers:
            marker = " ✔" if a.is_accepted else ""
            print()
            print(f"## Answer ({a.score}){marker}")
            print()
            print(a.body)
        print()
        print("-" * 60)


def run(opts: Opts, client: httpx.Client) -> int:
    """Execute one invocation. Returns the process exit status."""
    config = opts.config
    registry = SiteRegistry(client=client)

    if opts.resolution.api_key_to_persist is not None:
        set_api_key(opts.resolution.api_key_to_persist)
        print_success("API key set!")

    if opts.update_sites:
        sites = registry.force_refresh()
        print_success(f"Sites updated ({len(sites)} sites).")

    if opts.list_sites:
        for site in registry.get_sites():
            print(f"{site.api_site_parameter}: {site.site_url}")
        return 0

    if opts.query is None:
        return 0

    for code in config.sites:
        registry.require(code)

    if config.duckduckgo:
        print_warn("DuckDuckGo search is not supported yet; querying StackExchange directly.")
    if len(config.sites) > 1:
        logger.info("Multiple sites configured; searching %s only", config.site)

    questions = StackExchange(config, client=client).search(opts.query)
    if not questions:
        print_notice("Sorry, couldn't find any answers for your query.")
        return 0
    print_questions(questions, config.lucky)
    return 0


def make_client() -> httpx.Client:
    return httpx.Client()


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    logging.basicConfig(
        level=getattr(logging, os.getenv("SO_LOG_LEVEL", "WARNING").upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        opts = get_opts(argv)
        with make_client() as client:
            return run(opts, client)
    except SoError as e:
        print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
