"""semindex ingest pipeline — line chunker and watch-folder ingestor."""

from semindex.ingest.chunker import LineChunker, split
from semindex.ingest.pipeline import IngestConfig, Ingestor, IngestReport

__all__ = [
    "IngestConfig",
    "IngestReport",
    "Ingestor",
    "LineChunker",
    "split",
]
