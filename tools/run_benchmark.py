#!/usr/bin/env python3
"""
Benchmark Runner

Runs the mate-in-one and tactics suites at multiple depths, and optionally
a perft count from the starting position, to establish baseline
performance metrics for the engine.

Usage:
    python tools/run_benchmark.py [--depths 1,2] [--evaluator material|positional]
                                  [--perft 3] [--verbose]
"""

import sys
import argparse
import time
from pathlib import Path

from tqdm import tqdm

sys.path.insert(0, str(Path(__file__).parent.parent))

from minimax_chess.board import Board
from minimax_chess.evaluation import MaterialEvaluator, PositionalEvaluator
from minimax_chess.utils.testing import (
    MATE_IN_ONE_POSITIONS,
    TACTICS_POSITIONS,
    evaluate_position,
    perft,
)

EVALUATORS = {
    "material": MaterialEvaluator,
    "positional": PositionalEvaluator,
}


def format_time(seconds: float) -> str:
    """Format time"""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.0f}s"


def run_benchmark(depths: list[int], evaluator_name: str = "positional", verbose: bool = False):
    """
    Run both suites at multiple depths.

    Args:
        depths: List of depths to test
        evaluator_name: Key of EVALUATORS
        verbose: If True, print detailed results for each position
    """
    evaluator = EVALUATORS[evaluator_name]()
    positions = MATE_IN_ONE_POSITIONS + TACTICS_POSITIONS

    print("=" * 80)
    print("BENCHMARK - MinimaxChess")
    print("=" * 80)
    print(f"Evaluator: {evaluator}")
    print("Search: Minimax with Alpha-Beta Pruning")
    print(f"Depths: {depths}")
    print("=" * 80)
    print()

    all_results = []

    for depth in depths:
        start_time = time.time()
        results = [
            evaluate_position(position, depth, evaluator, verbose=verbose)
            for position in tqdm(positions, desc=f"Depth {depth}", leave=False)
        ]
        total_time = time.time() - start_time

        score = sum(1 for r in results if r.correct)
        total_nodes = sum(r.nodes_searched for r in results)
        nodes_per_sec = total_nodes / total_time if total_time > 0 else 0

        all_results.append({
            'depth': depth,
            'score': score,
            'total': len(results),
            'percentage': 100 * score / len(results) if results else 0,
            'avg_time': total_time / len(results) if results else 0,
            'total_time': total_time,
            'total_nodes': total_nodes,
            'nodes_per_sec': nodes_per_sec,
            'results': results,
        })

        failed = [r for r in results if not r.correct]
        if failed and verbose:
            print("\n  Failed positions:")
            for r in failed:
                print(f"    {r.position.id}: Expected {r.position.best_moves}, got {r.found_move}")

    print("\n" + "=" * 80)
    print("SUMMARY TABLE")
    print("=" * 80)
    print(f"{'Depth':<8} {'Correct':<12} {'%':<8} {'Avg Time':<12} {'Nodes/sec':<15}")
    print("-" * 80)

    for r in all_results:
        print(f"{r['depth']:<8} {r['score']}/{r['total']:<8} {r['percentage']:<7.1f}% {format_time(r['avg_time']):<12} {r['nodes_per_sec']:>12,.0f}")

    print("=" * 80)

    return all_results


def run_perft(depth: int):
    """Print perft counts from the starting position up to `depth`."""
    board = Board.starting_position()
    print("\nPERFT (starting position)")
    print("-" * 80)
    for d in range(1, depth + 1):
        start_time = time.time()
        nodes = perft(board, d)
        elapsed = time.time() - start_time
        print(f"  depth {d}: {nodes:,} nodes in {format_time(elapsed)}")


def main():
    parser = argparse.ArgumentParser(
        description="Run the engine test suites at multiple depths"
    )
    parser.add_argument(
        "--depths",
        type=str,
        default="1,2",
        help="Comma-separated list of depths to test (default: 1,2)"
    )
    parser.add_argument(
        "--evaluator",
        choices=sorted(EVALUATORS),
        default="positional",
        help="Evaluator to search with (default: positional)"
    )
    parser.add_argument(
        "--perft",
        type=int,
        default=0,
        help="Also count perft from the starting position up to this depth"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print detailed results for each position"
    )

    args = parser.parse_args()

    try:
        depths = [int(d.strip()) for d in args.depths.split(",")]
    except ValueError:
        print("Error: depths must be comma-separated integers")
        sys.exit(1)

    try:
        run_benchmark(depths, args.evaluator, verbose=args.verbose)
        if args.perft:
            run_perft(args.perft)
    except KeyboardInterrupt:
        print("\n\nBenchmark interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
