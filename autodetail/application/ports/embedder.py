from __future__ import annotations

from abc import ABC, abstractmethod


class EmbedderPort(ABC):
    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Embed a batch of texts.

        Must return exactly one vector per input text, in input order.
        Raises EmbeddingUpstreamError on provider failures.
        """
        raise NotImplementedError

    def embed_query(self, text: str) -> list[float]:
        return self.embed([text])[0]
