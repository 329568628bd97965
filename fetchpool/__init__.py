"""
fetchpool: download a batch of URLs with a fixed pool of concurrent workers.
"""

__version__ = "0.1.0"
