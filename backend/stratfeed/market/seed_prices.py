"""Instrument universe and reference prices."""

# Symbols streamed by default, grouped the way the dashboard groups them
WATCHLIST: tuple[str, ...] = (
    "AAPL", "MSFT", "GOOGL", "AMZN", "META", "TSLA", "NVDA", "AMD", "SMCI", "PLTR",
)
INDICES: tuple[str, ...] = ("SPY", "QQQ", "DIA", "IWM", "VIX")
METALS: tuple[str, ...] = ("GLD", "SLV", "GDX")
FUTURES: tuple[str, ...] = ("MNQ", "MES", "MGC", "SIL", "M2K")

DEFAULT_SYMBOLS: tuple[str, ...] = WATCHLIST + INDICES + METALS + FUTURES

# Session open prices used as the reference for change / change_percent on the
# price board, and as the starting point for simulated ticks
SEED_PRICES: dict[str, float] = {
    "AAPL": 181.00,
    "MSFT": 405.00,
    "GOOGL": 153.00,
    "AMZN": 174.00,
    "META": 485.00,
    "TSLA": 175.00,
    "NVDA": 880.00,
    "AMD": 182.00,
    "SMCI": 1050.00,
    "PLTR": 24.00,
    "SPY": 512.00,
    "QQQ": 435.00,
    "DIA": 389.00,
    "IWM": 207.00,
    "VIX": 15.00,
    "GLD": 198.00,
    "SLV": 23.00,
    "GDX": 29.80,
    "MNQ": 18150.00,
    "MES": 5100.00,
    "MGC": 2170.00,
    "SIL": 24.20,
    "M2K": 2060.00,
}
