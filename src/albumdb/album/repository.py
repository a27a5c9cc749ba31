from typing import Iterator, List

import psycopg
from psycopg.rows import class_row

from albumdb.album.model import Album
from albumdb.db import Database
from albumdb.errors import NotFoundError, ReadError, WriteError
from albumdb.log import get_logger

logger = get_logger(__name__)

# Explicit columns, mapped to Album fields by name
COLUMNS = "id, title, artist, score"


class AlbumRepository:
    """
    Repository for album data access.
    Encapsulates all SQL and queries for the albums table.
    """

    def __init__(self, db: Database):
        self.db = db

    def insert(self, album: Album) -> None:
        """Insert an album. The generated id is not read back."""
        try:
            self.db.execute(
                "INSERT INTO albums (title, artist, score) VALUES (%s, %s, %s)",
                (album.title, album.artist, album.score),
            )
        except psycopg.Error as e:
            raise WriteError(f"insert {album.title!r} by {album.artist!r}: {e}") from e
        logger.debug("Inserted %r by %r", album.title, album.artist)

    def create(self, album: Album) -> Album:
        """Insert an album and return the stored row, id included."""
        try:
            return self.db.fetch_one(
                f"""
                INSERT INTO albums (title, artist, score)
                VALUES (%s, %s, %s)
                RETURNING {COLUMNS}
                """,
                (album.title, album.artist, album.score),
                row_factory=class_row(Album),
            )
        except psycopg.Error as e:
            raise WriteError(f"create {album.title!r} by {album.artist!r}: {e}") from e

    def get_by_id(self, album_id: int) -> Album:
        """Get an album by ID."""
        try:
            album = self.db.fetch_one(
                f"SELECT {COLUMNS} FROM albums WHERE id = %s",
                (album_id,),
                row_factory=class_row(Album),
            )
        except psycopg.Error as e:
            raise ReadError(f"get_by_id {album_id}: {e}") from e
        if album is None:
            raise NotFoundError(f"get_by_id {album_id}: no such album")
        return album

    def find_one(self, title: str) -> Album:
        """
        Get the album with an exact title.

        Titles are not unique: when several rows match, whichever row the
        database returns first wins.

        Raises:
            NotFoundError: if no album has this title
            ReadError: on any other database error
        """
        try:
            album = self.db.fetch_one(
                f"SELECT {COLUMNS} FROM albums WHERE title = %s",
                (title,),
                row_factory=class_row(Album),
            )
        except psycopg.Error as e:
            raise ReadError(f"find_one {title!r}: {e}") from e
        if album is None:
            raise NotFoundError(f"find_one {title!r}: no such album")
        return album

    def find_many(self, artist: str) -> Iterator[Album]:
        """
        Stream the albums of an artist.

        The generator can be consumed once. If the cursor fails part way
        through, ReadError is raised after the rows already yielded.
        """
        rows = self.db.iter_rows(
            f"SELECT {COLUMNS} FROM albums WHERE artist = %s ORDER BY id",
            (artist,),
            row_factory=class_row(Album),
        )
        try:
            yield from rows
        except psycopg.Error as e:
            raise ReadError(f"find_many {artist!r}: {e}") from e

    def list_by_artist(self, artist: str) -> List[Album]:
        """All albums of an artist. Nothing is returned if the read fails."""
        return list(self.find_many(artist))
