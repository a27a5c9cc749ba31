#!/usr/bin/env python3
"""albumdb CLI: the database walkthrough and album lookups."""

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation

import questionary
from rich.console import Console
from rich.table import Table

from albumdb import config as cfg
from albumdb.album import Album, AlbumRepository
from albumdb.db import Database, await_ready, connect, redact_url
from albumdb.errors import AlbumDBError, ConnectError, ProbeError, SchemaError
from albumdb.log import configure_logging, get_logger
from albumdb.schema import ensure_schema

console = Console()
logger = get_logger(__name__)

SAMPLE_ALBUMS = [
    Album(title="Grace", artist="Jeff Buckley", score=9),
    Album(title="Sketches for My Sweetheart the Drunk", artist="Jeff Buckley", score=7.5),
    Album(title="Blue Train", artist="John Coltrane", score=8.5),
    Album(title="Giant Steps", artist="John Coltrane", score=9.5),
]


def albums_table(albums: list[Album], title: str = None) -> Table:
    """Render albums as a rich table."""
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Artist")
    table.add_column("Score", justify="right")
    for album in albums:
        table.add_row(
            "" if album.id is None else str(album.id),
            album.title,
            album.artist,
            str(album.score),
        )
    return table


def open_database() -> Database:
    """Build the handle from configuration. Exits the process if that fails."""
    if not cfg.env_loaded:
        logger.info("No .env file found. Using system env")

    try:
        url = cfg.config.database_url
        logger.info("Connection url: %s", redact_url(url))
        return connect(url)
    except ConnectError as e:
        logger.error("%s", e)
        sys.exit(1)


def run_demo(db: Database) -> int:
    """Create the table, insert the sample albums and query them back."""
    try:
        ensure_schema(db)
    except SchemaError as e:
        logger.error("%s", e)

    repo = AlbumRepository(db)
    for album in SAMPLE_ALBUMS:
        try:
            repo.insert(album)
        except AlbumDBError as e:
            logger.error("%s", e)

    try:
        grace = repo.find_one("Grace")
        console.print(f"[green]Found:[/] {grace.title} by {grace.artist} ({grace.score})")
    except AlbumDBError as e:
        logger.error("%s", e)

    try:
        albums = repo.list_by_artist("Jeff Buckley")
        console.print(albums_table(albums, title="Jeff Buckley"))
    except AlbumDBError as e:
        logger.error("%s", e)

    return 0


def init_db(db: Database) -> int:
    try:
        ensure_schema(db)
    except SchemaError as e:
        logger.error("%s", e)
        return 1
    return 0


def _is_score(text: str) -> bool | str:
    try:
        Decimal(text)
    except InvalidOperation:
        return "Enter a number"
    return True


def add_album(db: Database, title: str = None, artist: str = None, score: str = None) -> int:
    """Add one album, prompting for anything not given on the command line."""
    title = title or questionary.text("Title:").ask()
    artist = artist or questionary.text("Artist:").ask()
    score = score or questionary.text("Score (0-10):", validate=_is_score).ask()

    # User pressed Ctrl+C or Escape
    if title is None or artist is None or score is None:
        console.print("[dim]Cancelled.[/]")
        return 1

    try:
        album = AlbumRepository(db).create(Album(title=title, artist=artist, score=Decimal(score)))
    except (AlbumDBError, InvalidOperation) as e:
        logger.error("%s", e)
        return 1
    console.print(f"[green]Added album {album.title!r} with id {album.id}.[/]")
    return 0


def find_album(db: Database, title: str) -> int:
    try:
        album = AlbumRepository(db).find_one(title)
    except AlbumDBError as e:
        logger.error("%s", e)
        return 1
    console.print(albums_table([album]))
    return 0


def find_by_artist(db: Database, artist: str) -> int:
    try:
        albums = AlbumRepository(db).list_by_artist(artist)
    except AlbumDBError as e:
        logger.error("%s", e)
        return 1
    if not albums:
        console.print(f"[red]No albums found for {artist}.[/]")
        return 0
    console.print(albums_table(albums, title=artist))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="albumdb CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Stop waiting for the database after this many seconds (default: wait forever)",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("demo", help="Run the walkthrough (default)")
    subparsers.add_parser("init-db", help="Create the albums table")

    add = subparsers.add_parser("add", help="Add an album")
    add.add_argument("--title")
    add.add_argument("--artist")
    add.add_argument("--score")

    find = subparsers.add_parser("find", help="Find an album by title")
    find.add_argument("title")

    by_artist = subparsers.add_parser("by-artist", help="List albums by artist")
    by_artist.add_argument("artist")

    return parser


def main(argv: list[str] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    with open_database() as db:
        try:
            await_ready(db, interval=cfg.config.probe_interval, timeout=args.timeout)
        except ProbeError as e:
            logger.error("%s", e)
            return 1

        if args.command == "init-db":
            return init_db(db)
        elif args.command == "add":
            return add_album(db, args.title, args.artist, args.score)
        elif args.command == "find":
            return find_album(db, args.title)
        elif args.command == "by-artist":
            return find_by_artist(db, args.artist)
        return run_demo(db)


if __name__ == "__main__":
    sys.exit(main())
