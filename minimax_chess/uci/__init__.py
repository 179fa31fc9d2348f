"""
UCI Protocol Interface

This module implements the Universal Chess Interface (UCI) protocol,
which allows the engine to communicate with chess GUIs like Arena,
En-croissant, and Cute Chess.

Protocol Flow:
    GUI → "uci"
    Engine → "id name MinimaxChess 0.1.0"
    Engine → "uciok"
    GUI → "isready"
    Engine → "readyok"
    GUI → "position startpos moves e2e4"
    GUI → "go depth 3"
    Engine → "info depth 3 score cp 25 nodes 12345 time 900 pv e7e5"
    Engine → "bestmove e7e5"

Reference:
    UCI Protocol: https://www.chessprogramming.org/UCI
"""

from minimax_chess.uci.interface import UCIEngine

__all__ = ['UCIEngine']
