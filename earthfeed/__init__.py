"""Resilient Earth-view feed acquisition engine.

Fetches the latest NASA EPIC still image (with caching, retries, and
endpoint fallback) or keeps a live Earth video stream alive across an
ordered list of backup sources, and reports results to an external
presentation layer.
"""

__version__ = "0.1.0"
