"""Elo rating update applied once per completed match."""

from src.wg_common.chips import round_half_up

K_FACTOR = 32


def expected_score(rating: int, opponent_rating: int) -> float:
    return 1 / (1 + 10 ** ((opponent_rating - rating) / 400))


def updated_ratings(winner_rating: int, loser_rating: int, k: int = K_FACTOR) -> tuple[int, int]:
    """New (winner, loser) ratings.

    Each side is rounded independently, so the pair is not always zero-sum
    after rounding.
    """
    expected_winner = expected_score(winner_rating, loser_rating)
    expected_loser = 1 - expected_winner
    return (
        round_half_up(winner_rating + k * (1 - expected_winner)),
        round_half_up(loser_rating + k * (0 - expected_loser)),
    )
