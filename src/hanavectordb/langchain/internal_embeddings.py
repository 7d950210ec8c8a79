"""Marker embeddings for HANA's in-database ``VECTOR_EMBEDDING`` function."""

from langchain_core.embeddings import Embeddings


class HanaInternalEmbeddings(Embeddings):
    """Embeddings placeholder that makes ``HanaDB`` embed inside HANA.

    Passing an instance to :class:`~hanavectordb.langchain.vectorstore.HanaDB`
    switches the store to internal mode: documents and queries are embedded
    by ``VECTOR_EMBEDDING`` with ``model_id`` and never leave the database as
    text to be embedded on the client. Calling the embed methods directly is
    an error.

    Args:
        internal_embedding_model_id: Id of the model deployed in HANA, e.g.
            ``"SAP_NEB.20240715"``.
    """

    is_hana_internal_embeddings = True

    def __init__(self, internal_embedding_model_id: str):
        self.model_id = internal_embedding_model_id

    def get_model_id(self) -> str:
        return self.model_id

    def embed_query(self, text: str) -> list[float]:
        raise NotImplementedError(
            "Internal embeddings are computed by HANA, not on the client"
        )

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "Internal embeddings are computed by HANA, not on the client"
        )
