"""
Assessment Results Engine

Turns completed multi-rater assessment responses into an immutable results
snapshot: competency scores, strengths, development areas, current ceiling,
Coaching Capacity Index and trend.
"""

__version__ = "1.0.0"
