from __future__ import annotations

import json
from collections import Counter, defaultdict
from pathlib import Path

from loanhub.services import faq_store
from loanhub.services.embedding import embed

CASES_PATH = Path(__file__).parent / "faq_match_cases.jsonl"

CATEGORIES = sorted({c for _, _, c in faq_store.DEFAULT_FAQS})


def load_cases():
    with open(CASES_PATH, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            yield json.loads(line)


def test_faq_top1_accuracy_min_80(db):
    faq_store.seed_faqs(db)

    cases = list(load_cases())
    assert len(cases) >= 20

    correct = 0
    confusion = defaultdict(Counter)

    for c in cases:
        matches = faq_store.search_faq(db, c["text"])
        assert matches, f"No FAQ returned for {c['text']!r}"
        pred = matches[0].candidate.category
        confusion[c["expected"]][pred] += 1
        correct += int(pred == c["expected"])

    acc = correct / len(cases)

    lines = []
    for e in CATEGORIES:
        misses = {p: n for p, n in confusion[e].items() if p != e}
        lines.append(f"{e.ljust(16)} ok={confusion[e][e]} miss={misses}")
    print("\nFAQ top-1 accuracy:", acc)
    print("\n".join(lines))

    assert acc >= 0.8, f"FAQ top-1 accuracy {acc:.2%} < 80%."


def test_seed_stores_question_embeddings(db):
    count = faq_store.seed_faqs(db)
    faqs = faq_store.list_faqs(db)

    assert count == len(faq_store.DEFAULT_FAQS) == len(faqs)
    for faq in faqs:
        assert faq.embedding == embed(faq.question)


def test_seed_replaces_existing_faqs(db):
    faq_store.create_faq(db, "Old question?", "Old answer.")
    faq_store.seed_faqs(db)
    faq_store.seed_faqs(db)

    questions = [f.question for f in faq_store.list_faqs(db)]
    assert len(questions) == len(faq_store.DEFAULT_FAQS)
    assert "Old question?" not in questions


def test_search_respects_top_k_and_ignores_deleted(db):
    faq_store.seed_faqs(db)
    matches = faq_store.search_faq(db, "interest rate for car loan")
    assert len(matches) == 5
    assert matches[0].candidate.category == "interest-rates"

    faq_store.delete_faq(db, matches[0].candidate.id)
    again = faq_store.search_faq(db, "interest rate for car loan", k=20)
    assert len(again) == len(faq_store.DEFAULT_FAQS) - 1
    assert all(m.candidate.category != "interest-rates" for m in again)


def test_search_with_no_faqs_is_empty(db):
    assert faq_store.search_faq(db, "anything at all") == []


def test_update_reembeds_only_on_question_change(db):
    faq = faq_store.create_faq(db, "What is a down payment?", "The part you pay upfront.", None)
    assert faq.category == "general"
    original = list(faq.embedding)

    faq = faq_store.update_faq(db, faq.id, answer="The amount paid upfront.")
    assert faq.embedding == original

    faq = faq_store.update_faq(db, faq.id, question="How big is the down payment?", category="payments")
    assert faq.embedding == embed("How big is the down payment?")
    assert faq.category == "payments"


def test_delete_is_soft_and_not_repeatable(db):
    faq = faq_store.create_faq(db, "Question here?", "Answer here.")
    assert faq_store.delete_faq(db, faq.id) is True
    assert faq_store.get_faq(db, faq.id) is None
    assert faq_store.delete_faq(db, faq.id) is False
    assert faq_store.update_faq(db, faq.id, answer="x") is None
