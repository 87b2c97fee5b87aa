"""Digest pipeline orchestration."""

from curator.pipeline.digest import DigestPipeline, DigestResult


__all__ = ["DigestPipeline", "DigestResult"]
