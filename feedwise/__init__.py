"""
FeedWise Backend

A FastAPI backend for the FeedWise personal RSS reader.
Provides feed ingestion with deduplication, relevance ranking,
extractive summaries, and article management.
"""

__version__ = "1.0.0"
