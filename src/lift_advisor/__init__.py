"""
lift-advisor: strength-training recommendations.

Working weights from history and body composition, readiness and fatigue
tracking, injury-aware exercise swaps, variety-aware exercise selection
and discomfort pattern detection.
"""

__version__ = "0.4.0"
