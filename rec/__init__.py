"""Commandline Codeforces problem recommender with an Elo-style practice rating."""

__version__ = "1.0.0"
