"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Optional

# A move as it is stored: {"from_square": "e2", "to_square": "e4", "promote_to": None}
MoveRecord = dict[str, Optional[str]]


@dataclass
class GameModel:
    """Transport-safe representation of a chess game used between API, Service, DB, and Game layers."""

    starting_fen: str
    current_fen: str
    moves: list[MoveRecord] = field(default_factory=list)
    undone_moves: list[MoveRecord] = field(default_factory=list)
    status: str = "in progress"
