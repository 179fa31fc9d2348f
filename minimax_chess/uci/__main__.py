"""
Main entry point for running MinimaxChess as a UCI engine.

Usage:
    python -m minimax_chess.uci
"""

from minimax_chess.uci.interface import main

if __name__ == "__main__":
    main()
