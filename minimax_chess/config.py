"""
Engine configuration.

All evaluation weights live in one immutable EvaluationConfig value that is
built once and handed to the evaluator; nothing reads mutable globals.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

from minimax_chess.board.coordinates import BLACK, TEAM_NAMES, WHITE
from minimax_chess.board.pieces import PieceType


def _default_piece_values() -> Dict[PieceType, float]:
    return {
        PieceType.PAWN: 1.0,
        PieceType.KNIGHT: 3.0,
        PieceType.BISHOP: 3.0,
        PieceType.ROOK: 5.0,
        PieceType.QUEEN: 9.0,
        PieceType.KING: 0.0,
    }


def _default_attacking_power() -> Dict[PieceType, int]:
    return {
        PieceType.KNIGHT: 20,
        PieceType.BISHOP: 20,
        PieceType.ROOK: 40,
        PieceType.QUEEN: 80,
    }


@dataclass(frozen=True)
class EvaluationConfig:
    """Weights of the positional evaluator. Units are pawns."""

    piece_values: Dict[PieceType, float] = field(default_factory=_default_piece_values)
    """Material value per piece type"""

    positional_multiplier: float = 0.4
    """Scale applied to the sum of all positional terms"""

    # Space control
    centre_square_multiplier: float = 3.0
    """Zone weight of d4, e4, d5, e5"""

    semi_centre_square_multiplier: float = 2.0
    """Zone weight of the rest of the c3-f6 block"""

    value_per_square_controlled: float = 0.01

    # Pawn structure
    doubled_pawn_penalty: float = 0.3
    isolated_pawn_penalty: float = 0.3
    passed_pawn_bonus: float = 0.2
    """Per row advanced"""

    tarrasch_supporting_bonus: float = 0.3
    """Own rook behind a passed pawn"""

    tarrasch_blocking_penalty: float = 0.2
    """Enemy rook in front of a passed pawn"""

    knight_outpost_bonus: float = 0.1

    # Piece quality
    knight_bonus_per_pawn: float = 0.04
    minor_piece_development_penalty: float = 0.08
    fianchetto_bonus: float = 0.1
    bishop_pair_bonus: float = 0.5
    rook_pawn_penalty: float = 0.05
    rook_seventh_rank_bonus: float = 0.3
    connected_rook_bonus: float = 0.1
    rook_open_file_bonus: float = 0.1
    rook_semi_open_file_bonus: float = 0.05
    queen_early_development_penalty: float = 2.0
    """Divided by the number of positions played so far"""

    # King safety
    attacking_power: Dict[PieceType, int] = field(default_factory=_default_attacking_power)
    """Per attacked square in front of the king"""

    attacking_weight: Tuple[int, ...] = (0, 0, 50, 75, 88, 94, 97, 99)
    """Percentage of the attack value counted, indexed by attacker count"""

    pawn_attack_value: float = 0.2
    """Per enemy pawn storming the king"""

    no_pawn_in_front_of_king_penalty: float = 0.3
    """Per missing shield pawn once the king has moved"""

    mobility_divisor: float = 20.0

    def __post_init__(self):
        """Validate configuration after initialization."""
        missing = [t.name for t in PieceType if t != PieceType.NONE and t not in self.piece_values]
        if missing:
            raise ValueError(f"piece_values is missing {', '.join(missing)}")

        if self.positional_multiplier < 0:
            raise ValueError(
                f"positional_multiplier must be non-negative, got {self.positional_multiplier}"
            )

        if not self.attacking_weight:
            raise ValueError("attacking_weight must not be empty")

        if self.mobility_divisor <= 0:
            raise ValueError(f"mobility_divisor must be positive, got {self.mobility_divisor}")

    def piece_value(self, piece_type: PieceType) -> float:
        return self.piece_values.get(piece_type, 0.0)


@dataclass
class EngineConfig:
    """Settings of a game played against the engine."""

    search_depth: int = 3
    """Plies searched by the AI"""

    fifty_move_threshold: int = 51
    """Full moves without pawn move or capture before the game is drawn"""

    ai_team: int = BLACK
    """Team the AI plays"""

    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.search_depth <= 0:
            raise ValueError(f"search_depth must be positive, got {self.search_depth}")

        if self.fifty_move_threshold <= 0:
            raise ValueError(
                f"fifty_move_threshold must be positive, got {self.fifty_move_threshold}"
            )

        if self.ai_team not in (WHITE, BLACK):
            raise ValueError(f"ai_team must be WHITE (-1) or BLACK (1), got {self.ai_team}")

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"EngineConfig(\n"
            f"  Search: depth={self.search_depth}\n"
            f"  AI plays: {TEAM_NAMES[self.ai_team]}\n"
            f"  Fifty-move threshold: {self.fifty_move_threshold}\n"
            f")"
        )
