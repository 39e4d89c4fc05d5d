"""
Orchestration package for Local Gov Watch.

This package contains the pipeline that coordinates adapter fetching
and record enrichment.
"""

from .ingest_pipeline import IngestPipeline

__all__ = [
    "IngestPipeline",
]
