"""
Type definitions used across layers
"""

from enum import StrEnum


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class GameResult(StrEnum):
    WHITE_WINS = "white_wins"
    BLACK_WINS = "black_wins"
    DRAW = "draw"


class GameEndReason(StrEnum):
    """Why the game ended. Only used for messaging, the GameResult is what counts."""

    COLLISION = "collision"
    KING_CAPTURED = "king captured"
    CHECKMATE = "checkmate"
    DOUBLE_CHECKMATE = "double checkmate"
    STALEMATE = "stalemate"
    DOUBLE_STALEMATE = "double stalemate"
    TIMEOUT = "timeout"
    DOUBLE_TIMEOUT = "double timeout"


class RejectionReason(StrEnum):
    # move submissions
    NO_PIECE_AT_SOURCE = "no piece at source"
    WRONG_COLOR = "wrong color"
    REPEATED_PIECE = "repeated piece"
    ILLEGAL_MOVE = "illegal move"
    KING_STILL_IN_CHECK = "king still in check"
    # promotion choices
    SQUARE_MISMATCH = "square mismatch"
    NO_PENDING_PROMOTION = "no pending promotion"
    INVALID_PIECE_TYPE = "invalid piece type"


def winner_result(color: Color) -> GameResult:
    """Result for a game won by `color`"""
    return GameResult.WHITE_WINS if color == Color.WHITE else GameResult.BLACK_WINS
