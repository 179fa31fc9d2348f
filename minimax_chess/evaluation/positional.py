"""
Positional Evaluation

This module implements the full heuristic evaluation used by the AI:

    score = material + positional_multiplier * (
        - king_safety(White) + king_safety(Black)
        + mobility(White) - mobility(Black)
        + space_control
        + piece_quality(White) - piece_quality(Black)
        + pawn_structure(White) - pawn_structure(Black)
    )

Evaluation Components:
    - King safety: pieces attacking the two rows in front of the king,
      storming enemy pawns, missing shield pawns (higher = worse)
    - Mobility: quiet legal destinations of every piece but the queen
    - Space control: attack maps weighted by board zone (numpy)
    - Piece quality: knight/bishop/rook/queen placement bonuses
    - Pawn structure: passed, doubled, isolated pawns, Tarrasch rule,
      knight outposts

All weights come from EvaluationConfig.

Reference:
    Evaluation overview
    https://www.chessprogramming.org/Evaluation
"""

from typing import Dict, List, Optional

import numpy as np

from minimax_chess.board import BLACK, WHITE, Board, Coordinate, Piece, PieceType
from minimax_chess.board import rules
from minimax_chess.board.coordinates import BOARD_SIZE, pawn_start_row, promotion_row
from minimax_chess.config import EvaluationConfig
from minimax_chess.evaluation.base import Evaluator
from minimax_chess.evaluation.material import material_balance


def zone_weights(config: EvaluationConfig) -> np.ndarray:
    """
    Per-square weight used by space control.

    Returns:
        (8, 8) array indexed [row, column]: centre 2x2 uses the centre
        multiplier, the surrounding 4x4 block the semi-centre multiplier,
        everything else 1
    """
    zones = np.ones((BOARD_SIZE, BOARD_SIZE), dtype=np.float32)
    zones[2:6, 2:6] = config.semi_centre_square_multiplier
    zones[3:5, 3:5] = config.centre_square_multiplier
    return zones


class PositionalEvaluator(Evaluator):
    """
    Material plus weighted positional terms.

    Attributes:
        config: Evaluation weights
        zones: Space control weights per square
    """

    def __init__(self, config: Optional[EvaluationConfig] = None):
        """Initialize the evaluator with its weights."""
        self.config = config or EvaluationConfig()
        self.zones = zone_weights(self.config)

    def evaluate(self, board: Board) -> float:
        """
        Evaluate position using material + positional terms.

        Args:
            board: Position to evaluate

        Returns:
            float: Evaluation in pawns (White's perspective)
        """
        terminal_score = self.evaluate_terminal(board)
        if terminal_score is not None:
            return terminal_score

        pawns = {
            team: [p for p in board.pieces_of(team) if p.piece_type == PieceType.PAWN]
            for team in (WHITE, BLACK)
        }

        positional = 0.0
        positional -= self.king_safety(board, WHITE)
        positional += self.king_safety(board, BLACK)
        positional += self.mobility(board, WHITE)
        positional -= self.mobility(board, BLACK)
        positional += self.space_control(board)
        positional += self.piece_quality(board, WHITE, pawns)
        positional -= self.piece_quality(board, BLACK, pawns)
        positional += self.pawn_structure(board, WHITE, pawns)
        positional -= self.pawn_structure(board, BLACK, pawns)

        return material_balance(board, self.config) + positional * self.config.positional_multiplier

    # ========================================================================
    # King safety
    # ========================================================================

    def king_safety(self, board: Board, team: int) -> float:
        """
        Danger around the king of `team` (higher = less safe).

        Args:
            board: Position
            team: Side whose king is examined

        Returns:
            Attack score + pawn storm + missing shield pawns
        """
        king = board.get_king(team)
        if king is None:
            return 0.0
        cfg = self.config
        kx, ky = king.square

        band = [
            Coordinate(x, ky + team * rows)
            for rows in (1, 2)
            for x in (kx - 1, kx, kx + 1)
        ]
        band = [coor for coor in band if coor.in_bounds()]

        attacking_pieces = 0
        value_of_attacks = 0
        for attacker in board.pieces_of(-team):
            attacked = sum(1 for coor in band if rules.attacks(board, attacker, coor))
            if attacked:
                attacking_pieces += 1
                value_of_attacks += attacked * cfg.attacking_power.get(attacker.piece_type, 0)

        weight = cfg.attacking_weight[min(attacking_pieces, len(cfg.attacking_weight) - 1)]
        safety = value_of_attacks * weight / 100

        storm = 0
        for rows in (1, 2, 3):
            for x in (kx - 1, kx, kx + 1):
                occupant = board.piece_at(Coordinate(x, ky + team * rows))
                if occupant is not None and occupant.piece_type == PieceType.PAWN and occupant.team != team:
                    storm += 1
        safety += storm * cfg.pawn_attack_value

        if king.has_moved:
            shield = 0
            for x in (kx - 1, kx, kx + 1):
                occupant = board.piece_at(Coordinate(x, ky + team))
                if occupant is not None and occupant.piece_type == PieceType.PAWN and occupant.team == team:
                    shield += 1
            safety += (3 - shield) * cfg.no_pawn_in_front_of_king_penalty

        return safety

    # ========================================================================
    # Mobility
    # ========================================================================

    def mobility(self, board: Board, team: int) -> float:
        """
        Quiet legal destinations of all pieces except the queen, / 20.

        A knight destination covered by an enemy pawn is not counted.
        """
        enemy_pawns = [p for p in board.pieces_of(-team) if p.piece_type == PieceType.PAWN]
        count = 0
        for piece in board.pieces_of(team):
            if piece.piece_type == PieceType.QUEEN:
                continue
            for target in rules.legal_destinations(board, piece):
                if board.piece_at(target) is not None:
                    continue
                if piece.piece_type == PieceType.KNIGHT and any(
                    rules.attacks(board, pawn, target) for pawn in enemy_pawns
                ):
                    continue
                count += 1
        return count / self.config.mobility_divisor

    # ========================================================================
    # Space control
    # ========================================================================

    def attack_map(self, board: Board, team: int) -> np.ndarray:
        """Number of pieces of `team` attacking each square, indexed [row, column]."""
        attack_map = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int32)
        for piece in board.pieces_of(team):
            for coor in rules.attacked_squares(board, piece):
                attack_map[coor.y, coor.x] += 1
        return attack_map

    def space_control(self, board: Board) -> float:
        """
        Zone-weighted square control plus occupation of the inner zones.

        Each square counts +1 when White has more attackers on it, -1 when
        Black has more, 0 when even. Positive when White controls more of
        the centre.
        """
        control = np.sign(self.attack_map(board, WHITE) - self.attack_map(board, BLACK))
        controlled = float((control * self.zones).sum())

        for piece in board.pieces.values():
            weight = self.zones[piece.square.y, piece.square.x]
            if weight != 1:
                # White occupants count positive
                controlled += -piece.team * float(weight)

        return controlled * self.config.value_per_square_controlled

    # ========================================================================
    # Piece quality
    # ========================================================================

    def _is_fianchetto(self, board: Board, bishop: Piece) -> bool:
        x, y = bishop.square
        if x not in (1, 6) or y != pawn_start_row(bishop.team):
            return False
        edge = board.piece_at(Coordinate(0 if x == 1 else 7, y))
        front = board.piece_at(Coordinate(x, y + bishop.team))
        return all(
            p is not None and p.piece_type == PieceType.PAWN and p.team == bishop.team
            for p in (edge, front)
        )

    def _rook_file_bonus(self, board: Board, rook: Piece) -> float:
        cfg = self.config
        bonus = 0.0

        # First piece seen looking forward along the file
        y = rook.square.y + rook.team
        while 0 <= y < BOARD_SIZE:
            occupant = board.piece_at(Coordinate(rook.square.x, y))
            if occupant is not None:
                if occupant.piece_type == PieceType.ROOK and occupant.team == rook.team:
                    bonus += cfg.connected_rook_bonus
                break
            y += rook.team

        own_pawn = enemy_pawn = False
        for y in range(BOARD_SIZE):
            occupant = board.piece_at(Coordinate(rook.square.x, y))
            if occupant is not None and occupant.piece_type == PieceType.PAWN:
                if occupant.team == rook.team:
                    own_pawn = True
                else:
                    enemy_pawn = True
        if not own_pawn and not enemy_pawn:
            bonus += cfg.rook_open_file_bonus
        elif not own_pawn:
            bonus += cfg.rook_semi_open_file_bonus
        return bonus

    def piece_quality(self, board: Board, team: int, pawns: Dict[int, List[Piece]]) -> float:
        """
        Placement bonuses for knights, bishops, rooks and the queen.

        Args:
            board: Position
            team: Side to score
            pawns: Pawns of both sides, keyed by team
        """
        cfg = self.config
        total_pawns = len(pawns[WHITE]) + len(pawns[BLACK])
        seventh_row = promotion_row(team) - team
        light_bishop = dark_bishop = False
        power = 0.0

        for piece in board.pieces_of(team):
            if piece.piece_type == PieceType.KNIGHT:
                power += cfg.knight_bonus_per_pawn * total_pawns
                if not piece.has_moved:
                    power -= cfg.minor_piece_development_penalty

            elif piece.piece_type == PieceType.BISHOP:
                if self._is_fianchetto(board, piece):
                    power += cfg.fianchetto_bonus
                if piece.square.is_light:
                    light_bishop = True
                else:
                    dark_bishop = True
                if not piece.has_moved:
                    power -= cfg.minor_piece_development_penalty

            elif piece.piece_type == PieceType.ROOK:
                power -= cfg.rook_pawn_penalty * total_pawns
                if piece.square.y == seventh_row:
                    power += cfg.rook_seventh_rank_bonus
                power += self._rook_file_bonus(board, piece)

            elif piece.piece_type == PieceType.QUEEN:
                if piece.has_moved and piece.square.x in (3, 4):
                    power -= cfg.queen_early_development_penalty / max(len(board.history), 1)

        if light_bishop and dark_bishop:
            power += cfg.bishop_pair_bonus
        return power

    # ========================================================================
    # Pawn structure
    # ========================================================================

    def _is_outpost(self, coor: Coordinate, team: int, enemy_pawns: List[Piece]) -> bool:
        # No enemy pawn on an adjacent file still in front of the square
        for pawn in enemy_pawns:
            if abs(pawn.square.x - coor.x) == 1 and (pawn.square.y - coor.y) * team > 0:
                return False
        return True

    def pawn_structure(self, board: Board, team: int, pawns: Dict[int, List[Piece]]) -> float:
        """
        Score the pawns of `team`.

        Passed pawns earn a bonus per row advanced and the Tarrasch rule
        adjustments; doubled and isolated pawns are penalised; a knight on a
        square the pawn defends that enemy pawns can never attack is an
        outpost.
        """
        cfg = self.config
        own_pawns = pawns[team]
        enemy_pawns = pawns[-team]
        score = 0.0

        for pawn in own_pawns:
            x, y = pawn.square

            passed = not any(
                abs(enemy.square.x - x) <= 1 and (enemy.square.y - y) * team > 0
                for enemy in enemy_pawns
            )
            doubled = any(
                other.square.x == x and (other.square.y - y) * team > 0
                for other in own_pawns
                if other is not pawn
            )
            isolated = not any(abs(other.square.x - x) == 1 for other in own_pawns)

            if passed:
                advancement = (y - pawn_start_row(team)) * team
                score += cfg.passed_pawn_bonus * advancement

                supported = blocked = False
                for row in range(BOARD_SIZE):
                    occupant = board.piece_at(Coordinate(x, row))
                    if occupant is None or occupant.piece_type != PieceType.ROOK:
                        continue
                    ahead = (row - y) * team > 0
                    if occupant.team == team and not ahead:
                        supported = True
                    elif occupant.team != team and ahead:
                        blocked = True
                if supported:
                    score += cfg.tarrasch_supporting_bonus
                if blocked:
                    score -= cfg.tarrasch_blocking_penalty

            if doubled:
                score -= cfg.doubled_pawn_penalty
            if isolated:
                score -= cfg.isolated_pawn_penalty

            for dx in (-1, 1):
                defended = Coordinate(x + dx, y + team)
                occupant = board.piece_at(defended)
                if (
                    occupant is not None
                    and occupant.piece_type == PieceType.KNIGHT
                    and occupant.team == team
                    and self._is_outpost(defended, team, enemy_pawns)
                ):
                    score += cfg.knight_outpost_bonus

        return score
