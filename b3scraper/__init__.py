"""Batch scraper for B3 listed companies: fundamentals pages plus Yahoo Finance history."""

__version__ = "0.1.0"
