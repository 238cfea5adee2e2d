from __future__ import annotations

import json
from collections import Counter, defaultdict
from pathlib import Path
from types import SimpleNamespace

from loanhub.services.embedding import embed, rank
from loanhub.services.faq_store import DEFAULT_FAQS

CASES_PATH = Path(__file__).resolve().parents[1] / "tests" / "faq_match_cases.jsonl"


def main():
    faqs = [
        SimpleNamespace(question=q, answer=a, category=c, embedding=embed(q))
        for q, a, c in DEFAULT_FAQS
    ]
    labels = sorted({f.category for f in faqs})

    cases = []
    with open(CASES_PATH, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            cases.append(json.loads(line))

    correct = 0
    total = 0
    confusion = defaultdict(Counter)
    confidence = Counter()

    for c in cases:
        matches = rank(c["text"], embed(c["text"]), faqs)
        pred = matches[0].candidate.category if matches else "-"
        expected = c["expected"]
        confusion[expected][pred] += 1
        confidence[matches[0].confidence if matches else "-"] += 1
        total += 1
        correct += int(pred == expected)
        if pred != expected:
            print(f"MISS {c['text']!r}: expected {expected}, got {pred} ({matches[0].hybrid_score:.3f})")

    acc = correct / total if total else 0.0
    print(f"Cases: {total}")
    print(f"Top-1 accuracy: {acc:.2%}")
    print(f"Top-1 confidence: {dict(confidence)}")

    print("\nConfusion (non-zero):")
    for e in labels:
        row = ", ".join(f"{p}={n}" for p, n in confusion[e].most_common())
        print(f"{e.ljust(16)}{row}")


if __name__ == "__main__":
    main()
