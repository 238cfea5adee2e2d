"""
Hybrid FAQ matching: hashed bag-of-words embedding + Jaccard overlap.

Everything here is a pure function of its arguments, so it can be called from
any number of request handlers at once.
"""
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

EMBEDDING_DIM = 128
EMBEDDING_WEIGHT = 0.6
TEXT_WEIGHT = 0.4
TOP_K = 5

HIGH_CONFIDENCE = 0.5
MEDIUM_CONFIDENCE = 0.25

# ASCII word chars only; stored embeddings depend on this exact rule
_NON_WORD_RE = re.compile(r"[^0-9A-Za-z_\s]")
_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ScoredMatch:
    candidate: Any
    embedding_score: float
    text_score: float
    hybrid_score: float
    confidence: str


def tokenize(text: str) -> list[str]:
    cleaned = _NON_WORD_RE.sub("", (text or "").lower())
    return [w for w in _WS_RE.split(cleaned) if len(w) > 1]


def _hash_token(token: str) -> int:
    # h = h * 31 + c, wrapped to signed 32-bit after every step
    h = 0
    for ch in token:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
        if h >= 0x80000000:
            h -= 0x100000000
    return h


def embed(text: str, dim: int = EMBEDDING_DIM) -> list[float]:
    """
    Feature-hash the tokens of ``text`` into a ``dim``-slot count vector and
    scale it to unit length. Text without qualifying tokens gives the zero vector.
    """
    vector = [0.0] * dim
    for token in tokenize(text):
        vector[abs(_hash_token(token)) % dim] += 1

    magnitude = math.sqrt(sum(v * v for v in vector))
    if magnitude > 0:
        vector = [v / magnitude for v in vector]
    return vector


def cosine_similarity(vec_a: Sequence[float] | None, vec_b: Sequence[float] | None) -> float:
    if not vec_a or not vec_b:
        return 0.0

    # mismatched lengths compare the shared prefix only
    n = min(len(vec_a), len(vec_b))
    dot = 0.0
    mag_a = 0.0
    mag_b = 0.0
    for i in range(n):
        a = float(vec_a[i])
        b = float(vec_b[i])
        dot += a * b
        mag_a += a * a
        mag_b += b * b

    mag_a = math.sqrt(mag_a)
    mag_b = math.sqrt(mag_b)
    if mag_a == 0 or mag_b == 0:
        return 0.0
    return dot / (mag_a * mag_b)


def text_similarity(text_a: str, text_b: str) -> float:
    """Jaccard index of the two token sets."""
    set_a = set(tokenize(text_a))
    set_b = set(tokenize(text_b))
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def confidence_level(score: float) -> str:
    if score >= HIGH_CONFIDENCE:
        return "high"
    if score >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def _field(candidate: Any, name: str) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get(name)
    return getattr(candidate, name, None)


def rank(
    query_text: str,
    query_vector: Sequence[float],
    candidates: Sequence[Any],
    embedding_weight: float = EMBEDDING_WEIGHT,
    text_weight: float = TEXT_WEIGHT,
    k: int = TOP_K,
) -> list[ScoredMatch]:
    """
    Score every candidate (a mapping or an object with ``question`` and
    ``embedding``) against the query and return the best ``k``, highest
    ``hybrid_score`` first. Equal scores keep their input order.
    """
    scored = []
    for candidate in candidates or []:
        emb_score = cosine_similarity(query_vector, _field(candidate, "embedding") or [])
        txt_score = text_similarity(query_text, _field(candidate, "question") or "")
        hybrid = embedding_weight * emb_score + text_weight * txt_score
        scored.append(
            ScoredMatch(
                candidate=candidate,
                embedding_score=emb_score,
                text_score=txt_score,
                hybrid_score=hybrid,
                confidence=confidence_level(hybrid),
            )
        )

    scored.sort(key=lambda m: m.hybrid_score, reverse=True)
    return scored[:k]
