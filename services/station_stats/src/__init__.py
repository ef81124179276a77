"""
Station Stats Service

Aggregates `<station>;<measurement>` records into per-station
min/mean/max summaries using fixed-point arithmetic.
"""

__version__ = "1.0.0"
