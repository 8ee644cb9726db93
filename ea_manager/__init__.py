"""
EA Subscription Manager - Source Package

A small subscription dashboard for tracking EA account slots:
who is active, when each slot expires, what has been paid,
and a short AI-written audit of the current book.

DESIGN PRINCIPLES:
1. Status is derived from dates, never trusted from storage
2. History is append-only
3. Invalid input is rejected before anything is mutated
4. Storage and AI failures are never fatal
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "EA Subscription Manager Team"
