"""
Transfer Layer.

This package is responsible for moving a job's content from its source
location into its output file.
"""

from .fetcher import Fetcher, HttpFetcher

__all__ = ["Fetcher", "HttpFetcher"]
