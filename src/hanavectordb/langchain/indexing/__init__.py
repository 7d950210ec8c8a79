"""Indexing pipelines that write documents into HANA vector tables."""

from hanavectordb.langchain.indexing.hana import HanaIndexingPipeline


__all__ = ["HanaIndexingPipeline"]
