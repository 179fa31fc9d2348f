"""
MinimaxChess

A chess rules engine with a heuristic evaluator and minimax search with
alpha-beta pruning, playable through a game controller or as a UCI engine.

## Architecture

The engine is organized into several key modules:

1. **board**: Rules and game state
   - Coordinates, piece movement patterns, break points
   - Move legality, check safety, castling, en passant, promotion
   - Checkmate, stalemate, repetition, insufficient material and
     fifty-move detection

2. **evaluation**: Position evaluation functions
   - Abstract Evaluator interface (swappable design)
   - MaterialEvaluator: piece values only
   - PositionalEvaluator: material plus king safety, mobility, space
     control, piece quality and pawn structure

3. **search**: Search algorithms
   - Max/min alpha-beta search with deterministic move ordering
   - Unpruned minimax reference

4. **game**: Game controller
   - User moves, promotion choice, AI moves, setup mode

5. **uci**: Universal Chess Interface protocol
   - UCI command handling
   - Background search thread
   - Compatible with chess GUIs

6. **utils**: Testing and benchmarking utilities
   - Mate-in-one and tactics suites
   - Perft move counting

## Quick Start

### As a Python Library

```python
from minimax_chess.board import Board
from minimax_chess.evaluation import PositionalEvaluator
from minimax_chess.search import find_best_move

board = Board.starting_position()
best_move, score, nodes = find_best_move(board, depth=3, evaluator=PositionalEvaluator())
print(f"Best move: {best_move} (score: {score:.2f})")
```

### As a UCI Engine

```bash
python -m minimax_chess.uci
```

Then connect with a chess GUI (Arena, CuteChess, etc.)

## Version

0.1.0
"""

__version__ = "0.1.0"
__license__ = "MIT"

from minimax_chess.board import Board, Coordinate, PieceType
from minimax_chess.config import EngineConfig, EvaluationConfig
from minimax_chess.evaluation import Evaluator, MaterialEvaluator, PositionalEvaluator
from minimax_chess.game import GameController
from minimax_chess.search import find_best_move, max_search, min_search, minimax

__all__ = [
    'Board',
    'Coordinate',
    'PieceType',
    'EngineConfig',
    'EvaluationConfig',
    'Evaluator',
    'MaterialEvaluator',
    'PositionalEvaluator',
    'GameController',
    'find_best_move',
    'max_search',
    'min_search',
    'minimax',
]
