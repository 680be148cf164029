from __future__ import annotations

from openai import OpenAI

from autodetail.application.exceptions import EmbeddingUpstreamError
from autodetail.application.ports.embedder import EmbedderPort
from autodetail.core.config import settings


class OpenAIEmbedder(EmbedderPort):
    """
    OpenAI-backed adapter implementing EmbedderPort.

    Raises:
        EmbeddingUpstreamError: networking/provider failures or a response
        that does not carry one vector per input.
    """

    def __init__(self, model: str | None = None, dimensions: int | None = None) -> None:
        self.client = OpenAI(api_key=settings.OPENAI_API_KEY)
        self._model = model or settings.OPENAI_EMBEDDING_MODEL
        self._dimensions = dimensions or settings.EMBEDDING_DIMENSIONS

    def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            resp = self.client.embeddings.create(
                model=self._model,
                input=texts,
                dimensions=self._dimensions,
            )
        except Exception as e:
            raise EmbeddingUpstreamError(f"OpenAI API error: {e}") from e

        data = sorted(resp.data, key=lambda d: d.index)
        if len(data) != len(texts):
            raise EmbeddingUpstreamError(f"Expected {len(texts)} embeddings, got {len(data)}.")
        return [list(d.embedding) for d in data]
