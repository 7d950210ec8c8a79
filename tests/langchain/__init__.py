"""LangChain integration tests.

LangChain components tested:
    - HanaDB: VectorStore over a mocked HANA connection
    - HanaInternalEmbeddings: In-database embedding marker
    - EmbedderHelper, MMRHelper, StoreHelper: Pipeline helpers
    - HanaIndexingPipeline and HanaSearchPipeline: Config-driven pipelines
"""
