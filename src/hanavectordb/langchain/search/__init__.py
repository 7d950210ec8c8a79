"""Search pipelines over HANA vector tables, with optional MMR reranking."""

from hanavectordb.langchain.search.hana import HanaSearchPipeline


__all__ = ["HanaSearchPipeline"]
