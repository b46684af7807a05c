"""Gatherer card catalog scraper that emits SQL insert scripts."""

__version__ = "0.3.0"
