"""
Exceptions raised by the database gateway.

Every gateway error wraps the underlying psycopg exception (available as
``__cause__``) and carries a human readable message naming the record or
query key that failed.
"""


class AlbumDBError(Exception):
    """Base class for all albumdb errors."""


class ConnectError(AlbumDBError):
    """The connection descriptor is malformed or the handle could not be built."""


class ProbeError(AlbumDBError):
    """The database did not answer a reachability probe."""


class SchemaError(AlbumDBError):
    """Creating the albums table failed."""


class WriteError(AlbumDBError):
    """An insert was rejected by the database."""


class ReadError(AlbumDBError):
    """A select failed."""


class NotFoundError(ReadError):
    """A lookup matched zero rows."""
