"""
Application Security Scoring Engine
===================================
Derives a 0-100 security score per application from its catalog metadata:
50 points for knowledge sharing (metadata completeness and freshness) and
50 points for risk-weighted security tool usage.

The engine is a pure function of the application snapshot and three
configuration tables. It performs no I/O; persistence is up to the caller.
"""

__version__ = "1.0.0"
__author__ = "Application Security Scoring Engine"
