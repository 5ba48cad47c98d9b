"""Discover school hiring surfaces and harvest their job postings."""

__version__ = "0.1.0"
