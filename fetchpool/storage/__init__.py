"""
Storage Layer.

This package handles everything that touches the filesystem outside of the
transfer itself: the configuration file, the batch input file and the
per-job output sink.
"""

from .batch_file import BatchFile, load_batch_file
from .config_manager import ConfigManager
from .sink import OutputSink

__all__ = ["BatchFile", "ConfigManager", "OutputSink", "load_batch_file"]
