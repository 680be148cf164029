from __future__ import annotations

import hashlib
import math
import re

from autodetail.application.ports.embedder import EmbedderPort

TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


class HashingEmbedder(EmbedderPort):
    """
    Offline embedder: hashed bag of words, L2-normalized.

    Deterministic across processes, so vectors stored by one run still
    match queries from the next.
    """

    def __init__(self, dimensions: int = 256) -> None:
        self._dimensions = dimensions

    def embed(self, texts: list[str]) -> list[list[float]]:
        return [self._embed_one(text) for text in texts]

    def _embed_one(self, text: str) -> list[float]:
        vector = [0.0] * self._dimensions
        for token in TOKEN_PATTERN.findall(text.lower()):
            digest = hashlib.md5(token.encode("utf-8")).digest()
            index = int.from_bytes(digest[:4], "big") % self._dimensions
            sign = 1.0 if digest[4] % 2 == 0 else -1.0
            vector[index] += sign
        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            return vector
        return [v / norm for v in vector]
