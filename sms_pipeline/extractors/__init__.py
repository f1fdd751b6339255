"""Extractor tiers: cloud language model first, deterministic patterns as fallback"""

from .base import ExtractorStrategy
from .patterns import PatternTables, default_pattern_tables
from .pattern_extractor import PatternExtractor
from .cloud_extractor import CloudExtractor

__all__ = [
    "ExtractorStrategy",
    "PatternTables",
    "default_pattern_tables",
    "PatternExtractor",
    "CloudExtractor"
]
