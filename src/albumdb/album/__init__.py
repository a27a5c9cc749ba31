"""
Album

This package provides the Album record and its repository.
"""

from albumdb.album.model import Album
from albumdb.album.repository import AlbumRepository

__all__ = ["Album", "AlbumRepository"]
