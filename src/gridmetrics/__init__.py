"""
gridmetrics

Reliability metrics for electricity distribution incidents: outage
counts, cumulative and mean interruption time, energy not supplied,
SAIDI, SAIFI and CAIDI.
"""

__version__ = "0.1.0"
