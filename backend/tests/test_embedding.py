import math

import pytest

from loanhub.services.embedding import (
    EMBEDDING_DIM,
    ScoredMatch,
    _hash_token,
    confidence_level,
    cosine_similarity,
    embed,
    rank,
    text_similarity,
    tokenize,
)


def _norm(v):
    return math.sqrt(sum(x * x for x in v))


def test_tokenize_lowercases_strips_punctuation_and_short_tokens():
    assert tokenize("Hi, I'm a car-loan USER!") == ["hi", "im", "carloan", "user"]
    assert tokenize("") == []
    assert tokenize("a b c") == []


def test_hash_matches_31_polynomial_with_32bit_wraparound():
    assert _hash_token("ab") == 97 * 31 + 98
    # classic String.hashCode collision and overflow-to-MIN_VALUE cases
    assert _hash_token("Aa") == _hash_token("BB")
    assert _hash_token("polygenelubricants") == -(2 ** 31)


def test_overflowing_hash_lands_in_slot_zero():
    v = embed("polygenelubricants")
    assert v[0] == 1.0
    assert sum(v) == 1.0


def test_embed_is_deterministic():
    text = "What is the interest rate for vehicle loans?"
    first = embed(text)
    for _ in range(5):
        assert embed(text) == first


def test_embed_empty_and_short_input_is_zero_vector():
    for text in ["", "   ", "a ! ?", "I"]:
        v = embed(text)
        assert len(v) == EMBEDDING_DIM
        assert all(x == 0 for x in v)


@pytest.mark.parametrize(
    "text",
    ["car loan", "How do I apply for a vehicle loan?", "loan loan loan tenure", "EMI 2024 payment_due"],
)
def test_embed_is_unit_length(text):
    v = embed(text)
    assert len(v) == EMBEDDING_DIM
    assert _norm(v) == pytest.approx(1.0)
    assert min(v) >= 0


def test_repeated_tokens_weigh_more():
    v = embed("loan loan tenure")
    slots = sorted(x for x in v if x > 0)
    if len(slots) == 2:
        assert slots[1] == pytest.approx(2 * slots[0])


def test_cosine_self_similarity_is_one():
    v = embed("maximum loan amount for a used car")
    assert cosine_similarity(v, v) == pytest.approx(1.0)


def test_cosine_degenerate_inputs_are_zero():
    zero = [0.0] * EMBEDDING_DIM
    v = embed("car loan")
    assert cosine_similarity([], v) == 0
    assert cosine_similarity(v, []) == 0
    assert cosine_similarity(None, v) == 0
    assert cosine_similarity(zero, v) == 0
    assert cosine_similarity(v, zero) == 0


def test_cosine_truncates_mismatched_lengths():
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 5.0]) == pytest.approx(1.0)
    assert cosine_similarity([0.0, 1.0], [1.0, 0.0, 1.0]) == 0


def test_text_similarity_jaccard():
    assert text_similarity("car loan", "car loan") == 1.0
    assert text_similarity("car loan", "bike insurance") == 0.0
    assert text_similarity("Car LOAN!", "car loan") == 1.0
    assert text_similarity("car loan rate", "car loan") == pytest.approx(2 / 3)
    assert text_similarity("", "car loan") == 0
    assert text_similarity("a", "car loan") == 0


def test_confidence_thresholds():
    assert confidence_level(0.5) == "high"
    assert confidence_level(0.4999) == "medium"
    assert confidence_level(0.25) == "medium"
    assert confidence_level(0.2499) == "low"
    assert confidence_level(0.0) == "low"


def test_rank_empty_candidates():
    assert rank("anything", embed("anything"), []) == []


def test_rank_returns_at_most_five_sorted():
    questions = [
        "car loan interest",
        "car loan",
        "loan documents",
        "two wheeler loan",
        "apply online",
        "emi payment",
        "car insurance",
    ]
    candidates = [{"question": q, "embedding": embed(q)} for q in questions]
    results = rank("car loan", embed("car loan"), candidates)

    assert len(results) == 5
    assert all(isinstance(r, ScoredMatch) for r in results)
    scores = [r.hybrid_score for r in results]
    assert scores == sorted(scores, reverse=True)
    assert results[0].candidate["question"] == "car loan"
    assert results[0].confidence == "high"


def test_rank_fewer_than_five_candidates():
    candidates = [{"question": "car loan", "embedding": embed("car loan")}]
    assert len(rank("car loan", embed("car loan"), candidates)) == 1


def test_rank_ties_keep_input_order():
    candidates = [
        {"question": "alpha", "embedding": [], "id": 1},
        {"question": "beta", "embedding": [], "id": 2},
        {"question": "gamma", "embedding": [], "id": 3},
    ]
    results = rank("unrelated words", embed("unrelated words"), candidates)
    assert [r.candidate["id"] for r in results] == [1, 2, 3]
    assert all(r.hybrid_score == 0 and r.confidence == "low" for r in results)


def test_rank_missing_embedding_scores_text_only():
    candidates = [{"question": "car loan"}]
    [match] = rank("car loan", embed("car loan"), candidates)
    assert match.embedding_score == 0
    assert match.text_score == 1.0
    assert match.hybrid_score == pytest.approx(0.4)
    assert match.confidence == "medium"


def test_rank_accepts_objects_and_custom_weights():
    class Row:
        question = "zzz"
        embedding = [1.0]

    [match] = rank("car loan", [1.0], [Row()], embedding_weight=0.5, text_weight=0.5)
    assert match.hybrid_score == 0.5
    assert match.confidence == "high"


def test_hybrid_weights_default():
    candidates = [{"question": "completely different", "embedding": [1.0]}]
    [match] = rank("car loan", [1.0], candidates)
    assert match.embedding_score == 1.0
    assert match.text_score == 0
    assert match.hybrid_score == pytest.approx(0.6)


def test_interest_rate_scenario():
    candidates = [
        {"question": "What is the interest rate?", "embedding": embed("What is the interest rate?")},
        {"question": "How do I apply?", "embedding": embed("How do I apply?")},
    ]
    query = "interest rate for car loan"
    results = rank(query, embed(query), candidates)

    assert results[0].candidate["question"] == "What is the interest rate?"
    assert results[0].confidence in ("medium", "high")
    assert results[0].text_score == pytest.approx(2 / 8)


def test_rank_default_weights_confidence_boundary():
    # query {car, loan} vs {car, loan, rate, emi}: Jaccard 0.5
    # [1,0,0,0] vs [1,1,1,1]: cosine 0.5, so 0.6 * 0.5 + 0.4 * 0.5 == 0.5
    candidates = [
        {"question": "car loan rate emi", "embedding": [1.0, 1.0, 1.0, 1.0001], "id": "below"},
        {"question": "car loan rate emi", "embedding": [1.0, 1.0, 1.0, 1.0], "id": "exact"},
    ]
    exact, below = rank("car loan", [1.0, 0.0, 0.0, 0.0], candidates)

    assert exact.candidate["id"] == "exact"
    assert exact.embedding_score == 0.5
    assert exact.text_score == 0.5
    assert exact.hybrid_score == 0.5
    assert exact.confidence == "high"

    assert below.candidate["id"] == "below"
    assert 0.4999 < below.hybrid_score < 0.5
    assert below.confidence == "medium"
