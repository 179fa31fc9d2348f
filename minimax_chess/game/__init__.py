"""
Game Module

Drives a game between a user and the engine: user moves, promotion choice,
AI moves, and setup mode.
"""

from minimax_chess.game.controller import GameController, SetupStatus

__all__ = ['GameController', 'SetupStatus']
