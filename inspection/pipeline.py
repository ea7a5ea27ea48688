# -*- coding: utf-8 -*-
"""
inspection.pipeline

1 回分のテキストを「どう分類するか」だけを決める純粋関数の層です。
Store への書き込みは session_state 側で行います。

流れ
----
1) extract_structured(raw_text)
   - Structured  → モデルが返した categorized_items をそのまま候補にする
   - Failure     → classify_by_keywords(raw_text) で候補を作る
2) resolve_transcript
   - 候補なし + 文字起こしが空 → 固定のフォールバック文言
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from core.logging import logger
from .classifier import ConfidencePolicy, classify_by_keywords, default_policy
from .extractor import Structured, extract_structured
from .findings_store import AssignmentCandidate
from .merger import resolve_transcript
from .taxonomy import Taxonomy

ClassificationPath = Literal["structured", "fallback"]


@dataclass(frozen=True)
class Classification:
    path: ClassificationPath
    transcript: str
    candidates: List[AssignmentCandidate] = field(default_factory=list)


def classify_response(
    raw_text: str,
    taxonomy: Taxonomy,
    policy: Optional[ConfidencePolicy] = None,
) -> Classification:
    raw_text = raw_text or ""
    result = extract_structured(raw_text)

    if isinstance(result, Structured):
        return Classification(
            path="structured",
            transcript=resolve_transcript(result.transcript, result.items),
            candidates=list(result.items),
        )

    logger.info(f"[pipeline] 構造化レスポンスなし ({result.reason}) → キーワード分類")

    candidates = classify_by_keywords(raw_text, taxonomy, policy or default_policy())
    return Classification(
        path="fallback",
        transcript=resolve_transcript(raw_text, candidates),
        candidates=candidates,
    )
