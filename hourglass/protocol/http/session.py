from __future__ import annotations

import threading
import uuid
from typing import Dict, Optional

from ...engine.board import Board


class BoardSessionStore:
    """Thread-safe in-memory store of boards keyed by ``game_id``.

    FastAPI runs sync dependencies and handlers in a worker pool, so every
    access goes through one re-entrant lock.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._boards: Dict[str, Board] = {}

    def create(self, board: Optional[Board] = None) -> str:
        """Store ``board`` (default: the starting position) and return its id."""
        gid = str(uuid.uuid4())
        with self._lock:
            self._boards[gid] = Board.new() if board is None else board
        return gid

    @property
    def lock(self) -> threading.RLock:
        """Lock to hold while reading or mutating a stored board."""
        return self._lock

    def get(self, game_id: str) -> Optional[Board]:
        with self._lock:
            return self._boards.get(game_id)

    def delete(self, game_id: str) -> bool:
        """Drop a session; returns False if ``game_id`` was unknown."""
        with self._lock:
            return self._boards.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._boards)
