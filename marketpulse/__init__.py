"""
MarketPulse Competitive Intelligence Pipeline

Turns keyword search-volume data into competitive intelligence:
1. Collects brand and intent keyword volumes from DataForSEO
2. Derives five composite scores (momentum, pressure, anomalies, intent, sentiment)
3. Synthesizes a severity-ranked alert feed
4. Caches the whole payload so the paid API is hit at most once per cycle
"""

__version__ = "0.1.0"
