"""
Shared fixtures.
"""

import pytest

from minimax_chess.board import Board
from minimax_chess.uci.interface import parse_uci_move


def _play(board: Board, *moves: str) -> Board:
    for move_str in moves:
        parsed = parse_uci_move(board, move_str)
        assert parsed is not None, f"No piece on the start square of {move_str}"
        result = board.apply_move(*parsed)
        assert result.accepted, f"{move_str} should be accepted, got {result}"
    return board


@pytest.fixture
def play():
    """Apply UCI move strings to a board, asserting each one is accepted."""
    return _play


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path, monkeypatch):
    """Keep engine log files out of the home directory."""
    monkeypatch.setattr("minimax_chess.uci.interface.LOG_DIR", tmp_path / "logs")
