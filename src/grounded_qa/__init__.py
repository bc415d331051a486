"""Grounded question-answering package."""

from .config import ChunkingConfig, PipelineConfig, RetrievalConfig

__all__ = ["ChunkingConfig", "PipelineConfig", "RetrievalConfig"]
