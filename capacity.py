"""Reading capacity heuristic.

Turns the number of well-read documents in a lookback window into a
weekly article quota:

    reading per day = well-read documents / lookback days
    saving per day  = reading per day * SAVE_TO_READ_RATIO
    weekly quota    = ceil(saving per day * DAYS_PER_RUN), clamped to [3, 25]

The reader is modeled as saving roughly twice as many articles as they
finish, and the tool is expected to run once a week.
"""

import math

from models.capacity import CapacityEstimate

MIN_ARTICLES = 3
MAX_ARTICLES = 25
SAVE_TO_READ_RATIO = 2
DAYS_PER_RUN = 7


def estimate(well_read_count: int, lookback_days: int) -> CapacityEstimate:
    """Estimate how many new articles to recommend this week.

    Args:
        well_read_count: Documents read past the progress threshold in the window
        lookback_days: Length of the window in days

    Returns:
        CapacityEstimate with per-day rates and the clamped weekly count

    Raises:
        ValueError: If lookback_days is not positive or well_read_count is negative

    Example:
        >>> estimate(20, 42).recommended_article_count
        7
    """
    if lookback_days <= 0:
        raise ValueError(f"lookback_days must be positive, got {lookback_days}")
    if well_read_count < 0:
        raise ValueError(f"well_read_count must be non-negative, got {well_read_count}")

    reading_per_day = well_read_count / lookback_days
    saving_per_day = reading_per_day * SAVE_TO_READ_RATIO

    count = math.ceil(saving_per_day * DAYS_PER_RUN)
    count = max(MIN_ARTICLES, min(MAX_ARTICLES, count))

    return CapacityEstimate(
        reading_capacity_per_day=reading_per_day,
        saving_capacity_per_day=saving_per_day,
        recommended_article_count=count,
    )
