"""
Chess Engine Testing and Benchmarking

This module provides test suites and move generation checks for
evaluating the engine.

Test Suites:
    1. Mate in one: positions with a forced mate on the next move
       - Solved at depth 1 by any evaluator that scores decided games
       - A quick sanity check of checkmate detection

    2. Tactics: a piece can be won outright
       - Checks that captures are found and valued correctly

Move Generation:
    perft(board, depth) counts the leaf nodes of the legal move tree.
    Counts from well known positions are published (e.g. 20 / 400 / 8902
    from the starting position), and python-chess gives exact counts for
    any other position, so perft is the standard way to validate a move
    generator.

Evaluation Metrics:
    - Correct Moves: Number of positions where engine found best move
    - Time per Position: Average thinking time
    - Nodes Searched: Total nodes visited

References:
    - Perft: https://www.chessprogramming.org/Perft
    - Perft results: https://www.chessprogramming.org/Perft_Results
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List

from minimax_chess.board import Board
from minimax_chess.evaluation.base import Evaluator
from minimax_chess.search.minimax import find_best_move, find_legal_moves, play_move

logger = logging.getLogger(__name__)


@dataclass
class TestPosition:
    """
    A test position with expected best move(s).

    Attributes:
        fen: Board position in FEN notation
        best_moves: List of acceptable best moves (UCI format)
        description: Human-readable description of the position
        id: Position identifier (e.g., "M1.01")

    """
    __test__ = False

    fen: str
    best_moves: List[str]  # UCI move strings
    description: str = ""
    id: str = ""


@dataclass
class TestResult:
    """
    Result of testing a single position.

    Attributes:
        position: The test position
        found_move: Move the engine found (UCI format)
        score: Evaluation score for the move
        correct: Whether the engine found a best move
        time_taken: Time spent searching (seconds)
        nodes_searched: Number of nodes visited
        depth: Search depth used

    """
    __test__ = False

    position: TestPosition
    found_move: str
    score: float
    correct: bool
    time_taken: float
    nodes_searched: int = 0
    depth: int = 0


# ============================================================================
# Mate in one
# ============================================================================

MATE_IN_ONE_POSITIONS = [
    TestPosition(
        id="M1.01",
        fen="6k1/5ppp/8/8/8/8/8/R6K w - - 0 1",
        best_moves=["a1a8"],
        description="Back rank mate with Ra8#"
    ),
    TestPosition(
        id="M1.02",
        fen="r6k/8/8/8/8/8/5PPP/6K1 b - - 0 1",
        best_moves=["a8a1"],
        description="Back rank mate with Ra1#"
    ),
    TestPosition(
        id="M1.03",
        fen="r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5Q2/PPPP1PPP/RNB1K1NR w KQkq - 0 1",
        best_moves=["f3f7"],
        description="Scholar's mate with Qxf7#"
    ),
    TestPosition(
        id="M1.04",
        fen="k7/8/1K6/8/8/8/8/7Q w - - 0 1",
        best_moves=["h1h8", "h1b7"],
        description="Queen and king mate with Qh8# or Qb7#"
    ),
]


# ============================================================================
# Tactics
# ============================================================================

TACTICS_POSITIONS = [
    TestPosition(
        id="TC.01",
        fen="4k3/8/8/3r4/8/8/3Q4/4K3 w - - 0 1",
        best_moves=["d2d5"],
        description="White takes the undefended rook"
    ),
    TestPosition(
        id="TC.02",
        fen="4k3/3q4/8/8/3R4/8/8/4K3 b - - 0 1",
        best_moves=["d7d4"],
        description="Black takes the undefended rook"
    ),
]


def perft(board: Board, depth: int) -> int:
    """
    Count leaf nodes of the legal move tree.

    Args:
        board: Start position (not modified)
        depth: Plies to expand

    Returns:
        Number of move sequences of length `depth`
    """
    if depth == 0:
        return 1
    moves = find_legal_moves(board)
    if depth == 1:
        return len(moves)
    total = 0
    for move in moves:
        child = board.copy()
        play_move(child, move)
        total += perft(child, depth - 1)
    return total


def evaluate_position(
    position: TestPosition,
    depth: int,
    evaluator: Evaluator,
    verbose: bool = False,
) -> TestResult:
    """
    Evaluate a single test position.

    Args:
        position: Test position to evaluate
        depth: Search depth
        evaluator: Position evaluator
        verbose: If True, print detailed output

    Returns:
        TestResult with engine's move and whether it was correct
    """
    board = Board.from_fen(position.fen)

    if verbose:
        print(f"\nTesting {position.id}: {position.description}")
        print(f"FEN: {position.fen}")
        print(f"Expected moves: {position.best_moves}")

    start_time = time.time()

    try:
        best_move, score, nodes = find_best_move(board, depth, evaluator)
    except ValueError as e:
        logger.error(f"Error evaluating position {position.id}: {e}")
        return TestResult(
            position=position,
            found_move="",
            score=0.0,
            correct=False,
            time_taken=time.time() - start_time,
            depth=depth,
        )

    time_taken = time.time() - start_time
    found_move_uci = best_move.uci() if best_move else ""
    correct = found_move_uci in position.best_moves

    if verbose:
        print(f"Engine found: {found_move_uci} (score: {score:.2f})")
        print(f"Nodes searched: {nodes:,}")
        print(f"Time: {time_taken:.2f}s")
        print(f"Result: {'✓ CORRECT' if correct else '✗ WRONG'}")

    return TestResult(
        position=position,
        found_move=found_move_uci,
        score=score,
        correct=correct,
        time_taken=time_taken,
        nodes_searched=nodes,
        depth=depth,
    )


def run_suite(
    positions: List[TestPosition],
    evaluator: Evaluator,
    depth: int = 2,
    name: str = "TEST SUITE",
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Run a list of test positions.

    Args:
        positions: Positions to test
        evaluator: Position evaluator
        depth: Search depth (default: 2)
        name: Title printed in verbose mode
        verbose: If True, print detailed results

    Returns:
        Dictionary with test results:
            - score: Number of correct positions
            - total: Total number of positions
            - percentage: Success percentage
            - results: List of TestResult objects
            - avg_time: Average time per position
            - total_time: Time for the whole suite
    """
    if verbose:
        print("=" * 70)
        print(name)
        print("=" * 70)

    results = []
    correct_count = 0
    total_time = 0.0

    for position in positions:
        result = evaluate_position(position, depth, evaluator, verbose=verbose)
        results.append(result)

        if result.correct:
            correct_count += 1

        total_time += result.time_taken

    avg_time = total_time / len(positions) if positions else 0
    percentage = (correct_count / len(positions) * 100) if positions else 0

    if verbose:
        print("\n" + "=" * 70)
        print("SUMMARY")
        print("=" * 70)
        print(f"Score: {correct_count}/{len(positions)} ({percentage:.1f}%)")
        print(f"Average time: {avg_time:.2f}s")
        print(f"Total time: {total_time:.2f}s")

    return {
        'score': correct_count,
        'total': len(positions),
        'percentage': percentage,
        'results': results,
        'avg_time': avg_time,
        'total_time': total_time,
    }


def run_mate_in_one(evaluator: Evaluator, depth: int = 1, verbose: bool = True) -> Dict[str, Any]:
    """Run the mate-in-one suite (see run_suite for the result format)."""
    return run_suite(MATE_IN_ONE_POSITIONS, evaluator, depth, "MATE IN ONE", verbose)


def run_tactics(evaluator: Evaluator, depth: int = 2, verbose: bool = True) -> Dict[str, Any]:
    """Run the tactics suite (see run_suite for the result format)."""
    return run_suite(TACTICS_POSITIONS, evaluator, depth, "TACTICS", verbose)
