"""Moneyline price model — pure functions, no I/O, no state.

Pipeline:
  ratings --win_probability--> (pA, pB)
          --probability_to_price--> signed moneyline quote with house edge
          --adjust_for_volume--> quote skewed away from the over-exposed side
  payout(stake, quote) locks the total return for a wager.

Quotes are signed ints: favourites are negative (-150 = stake 150 to win 100),
underdogs positive (+130 = stake 100 to win 130). Payouts are floored to whole
chips so the book never pays a fraction it did not price.
"""

from dataclasses import dataclass

from src.wg_common.chips import round_half_up


@dataclass(frozen=True)
class PricingConfig:
    house_edge: float = 0.05
    min_probability: float = 0.05       # clamp on the raw rating probability
    max_probability: float = 0.95
    min_edged_probability: float = 0.01  # clamp after applying the edge
    max_edged_probability: float = 0.99
    min_price: int = -10_000
    max_price: int = 10_000
    even_money: int = 100               # no quote inside (-100, 100)
    volume_floor: int = 100             # below this total volume quotes do not move
    band_low: float = 0.35              # neutral exposure band
    band_high: float = 0.65
    skew_slope: float = 0.6             # 0.35 * 0.6 = 21% maximum adjustment


DEFAULT_PRICING = PricingConfig()


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_price(price: int, config: PricingConfig = DEFAULT_PRICING) -> int:
    """Hold a quote inside the magnitude band, keeping its sign.

    Repeated skews can push a favourite's quote toward zero; it stops at
    even money instead of crossing into a quote that pays many times the stake.
    """
    price = int(_clamp(price, config.min_price, config.max_price))
    if -config.even_money < price < 0:
        return -config.even_money
    if 0 <= price < config.even_money:
        return config.even_money
    return price


def win_probability(
    rating_a: int, rating_b: int, config: PricingConfig = DEFAULT_PRICING
) -> tuple[float, float]:
    """Logistic Elo curve, each side clamped to [min_probability, max_probability]."""
    p_a = 1 / (1 + 10 ** (-(rating_a - rating_b) / 400))
    p_b = 1 - p_a
    return (
        _clamp(p_a, config.min_probability, config.max_probability),
        _clamp(p_b, config.min_probability, config.max_probability),
    )


def probability_to_price(probability: float, config: PricingConfig = DEFAULT_PRICING) -> int:
    """Inflate probability by the house edge and convert to a moneyline quote."""
    p = _clamp(
        probability * (1 + config.house_edge),
        config.min_edged_probability,
        config.max_edged_probability,
    )
    if p >= 0.5:
        price = round_half_up(-100 * p / (1 - p))
    else:
        price = round_half_up(100 * (1 - p) / p)
    return clamp_price(price, config)


def initial_prices(
    rating_a: int, rating_b: int, config: PricingConfig = DEFAULT_PRICING
) -> tuple[int, int]:
    p_a, p_b = win_probability(rating_a, rating_b, config)
    return probability_to_price(p_a, config), probability_to_price(p_b, config)


def adjust_for_volume(
    price: int,
    total_volume: int,
    side_volume: int,
    config: PricingConfig = DEFAULT_PRICING,
) -> int:
    """Skew a quote by the share of money already on its side.

    Over the neutral band the quote gets less attractive, under it more
    attractive, linearly in the distance from the band edge. For a positive
    quote "less attractive" means smaller; for a negative one it means a
    larger magnitude.
    """
    if total_volume <= 0 or total_volume < config.volume_floor:
        return price

    exposure = side_volume / total_volume
    if exposure > config.band_high:
        factor = 1 - (exposure - config.band_high) * config.skew_slope
    elif exposure < config.band_low:
        factor = 1 + (config.band_low - exposure) * config.skew_slope
    else:
        return price

    if price > 0:
        adjusted = round_half_up(price * factor)
    else:
        adjusted = round_half_up(price / factor)
    return clamp_price(adjusted, config)


def payout(stake: int, price: int) -> int:
    """Total return (stake included) for a winning wager, floored to whole chips."""
    if price == 0:
        raise ValueError("A moneyline price cannot be 0")
    if price > 0:
        return stake + stake * price // 100
    return stake + stake * 100 // -price


def profit(stake: int, price: int) -> int:
    return payout(stake, price) - stake


def implied_probability(price: int) -> float:
    """Break-even probability of a quote (edge included, not removed)."""
    if price > 0:
        return 100 / (price + 100)
    return -price / (-price + 100)


def expected_value(stake: int, price: int, true_probability: float) -> float:
    """Expected net result of a wager for the bettor at the given true probability."""
    return true_probability * profit(stake, price) - (1 - true_probability) * stake
