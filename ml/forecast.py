"""
Stock Price Forecast Generator.

Produces a synthetic historical price series and a forward "prediction"
series from trigonometric trend terms plus uniform noise. Nothing here is
learned from data.
"""
import logging
import math
from datetime import date, timedelta
from typing import List, Optional, Sequence

import numpy as np

from ml.config import (
    DEFAULT_BASE_PRICE,
    DEFAULT_FORECAST_DAYS,
    DEFAULT_HISTORY_DAYS,
    FORECAST_CONFIDENCE_DECAY,
    INITIAL_FORECAST_CONFIDENCE,
    MAX_VOLUME,
    MIN_FORECAST_CONFIDENCE,
    MIN_VOLUME,
    PRICE_FLOOR_RATIO,
    STOCK_SYMBOLS,
)
from ml.entities import ForecastPoint, ForecastSummary, PricePoint, StockSymbol
from ml.scoring import RandomState

logger = logging.getLogger(__name__)


def get_stock(symbol: str) -> Optional[StockSymbol]:
    """Look up a catalog entry by ticker, case-insensitively."""
    symbol = symbol.upper()
    for stock in STOCK_SYMBOLS:
        if stock.symbol == symbol:
            return stock
    return None


def base_price(symbol: str) -> float:
    stock = get_stock(symbol)
    return stock.current_price if stock else DEFAULT_BASE_PRICE


def forecast_confidence(step: int) -> float:
    """Confidence of the prediction `step` days ahead; never increases."""
    return max(MIN_FORECAST_CONFIDENCE, INITIAL_FORECAST_CONFIDENCE - step * FORECAST_CONFIDENCE_DECAY)


def historical(
    symbol: str,
    days: int = DEFAULT_HISTORY_DAYS,
    random_state: RandomState = None,
    today: Optional[date] = None,
) -> List[PricePoint]:
    """
    Generate a historical daily price series ending today.

    Args:
        symbol: Ticker; unknown tickers use a base price of 100
        days: Number of days of history before today
        random_state: Seed or Generator for noise and volumes
        today: Last date of the series (defaults to date.today())

    Returns:
        days + 1 price points in chronological order
    """
    if days < 0:
        raise ValueError(f"days must be non-negative, got {days}")

    rng = np.random.default_rng(random_state)
    today = today or date.today()
    base = base_price(symbol)
    floor = base * PRICE_FLOOR_RATIO

    series = []
    for offset in range(days, -1, -1):
        trend = 0.001 * math.sin(offset * 0.05)
        noise = 0.03 * (rng.random() - 0.5)
        decay = offset * 0.0001
        price = base * (1 + trend + noise - decay)

        series.append(
            PricePoint(
                date=today - timedelta(days=offset),
                price=max(price, floor),
                volume=int(rng.integers(MIN_VOLUME, MAX_VOLUME)),
            )
        )

    return series


def forecast(
    series: Sequence[PricePoint],
    days: int = DEFAULT_FORECAST_DAYS,
    random_state: RandomState = None,
    today: Optional[date] = None,
) -> List[ForecastPoint]:
    """
    Project prices forward from the last observed price.

    Every step is computed from the last observed price, not from the
    previous prediction.

    Args:
        series: Historical price points, oldest first
        days: Forecast horizon in days
        random_state: Seed or Generator for the noise term
        today: Date the horizon starts from (defaults to date.today())

    Returns:
        One forecast point per future day
    """
    if not series:
        raise ValueError("Cannot forecast from an empty price series")
    if days < 0:
        raise ValueError(f"days must be non-negative, got {days}")

    rng = np.random.default_rng(random_state)
    today = today or date.today()
    last_price = series[-1].price

    predictions = []
    for step in range(1, days + 1):
        trend = 0.002 * math.sin(step * 0.1) + 0.001
        noise = 0.02 * rng.random() - 0.01
        momentum = 0.001 * math.cos(step * 0.05)

        predictions.append(
            ForecastPoint(
                date=today + timedelta(days=step),
                predicted=last_price * (1 + trend + noise + momentum),
                confidence=forecast_confidence(step),
            )
        )

    logger.debug(f"Forecast {days} days from last price {last_price:.2f}")

    return predictions


def summarize_forecast(predictions: Sequence[ForecastPoint], current_price: float) -> ForecastSummary:
    """Average target price and confidence, and change versus the current price."""
    if not predictions:
        return ForecastSummary(
            average_predicted=current_price,
            average_confidence=0.0,
            price_change=0.0,
            change_percent=0.0,
        )

    average_predicted = float(np.mean([p.predicted for p in predictions]))
    average_confidence = float(np.mean([p.confidence for p in predictions]))
    price_change = average_predicted - current_price

    return ForecastSummary(
        average_predicted=average_predicted,
        average_confidence=average_confidence,
        price_change=price_change,
        change_percent=price_change / current_price * 100 if current_price else 0.0,
    )
