from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Album:
    """
    One row of the albums table.

    ``id`` stays None until the database assigns one. ``score`` must lie in
    [0, 10]; the table's CHECK constraint enforces it, not this class.
    """

    title: str
    artist: str
    score: Decimal | float | int
    id: int | None = None
