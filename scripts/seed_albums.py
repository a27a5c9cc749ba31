"""Seed the sample albums into the database."""
from albumdb.album import AlbumRepository
from albumdb.cli import SAMPLE_ALBUMS
from albumdb.config import config
from albumdb.db import await_ready, connect
from albumdb.errors import NotFoundError
from albumdb.log import configure_logging
from albumdb.schema import ensure_schema


def main():
    configure_logging()

    with connect(config.database_url) as db:
        await_ready(db, interval=config.probe_interval)
        ensure_schema(db)
        albums_repo = AlbumRepository(db)

        for album in SAMPLE_ALBUMS:
            try:
                existing = albums_repo.find_one(album.title)
            except NotFoundError:
                existing = None
            if existing:
                print(f"Skipping {album.title} - already exists")
                continue

            result = albums_repo.create(album)
            print(f"Created: {result.title} (id={result.id})")


if __name__ == "__main__":
    main()
