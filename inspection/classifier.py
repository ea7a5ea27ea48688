# -*- coding: utf-8 -*-
"""
視察メモのキーワード分類モジュール (フォールバック経路)。

役割
----
- classify_by_keywords(text, taxonomy, policy):
    構造化レスポンスが取れなかったとき、入力テキストをそのまま
    各カテゴリのキーワードと突き合わせて分類候補を作る。

ルール
------
- 一致判定は「大文字小文字を区別する単純な部分文字列」だけ。
  正規化・形態素解析はしない。
- 1 件でも一致したカテゴリごとに候補を 1 つ作る (複数カテゴリ同時可)。
  text は部分ではなく入力全体。
- 出力順はタクソノミーの登録順。
- 信頼度は policy(一致数)。既定の linear_confidence は 0.6 + 0.1 × 一致数 で、
  上限を設けない (5 件一致で 1.1)。1.0 で頭打ちにしたい場合は
  clamped_confidence を渡す。
"""

from __future__ import annotations

from typing import Callable, List

from core.config import (
    KEYWORD_BASE_CONFIDENCE,
    KEYWORD_STEP_CONFIDENCE,
    KEYWORD_CONFIDENCE_CLAMP,
)
from .findings_store import AssignmentCandidate
from .taxonomy import Category, Taxonomy

# 一致数 → 信頼度
ConfidencePolicy = Callable[[int], float]


# ------------------------------------------------------------
# 1. 信頼度ポリシー
# ------------------------------------------------------------

def linear_confidence(match_count: int) -> float:
    """base + step × 一致数。1.0 を超えても切らない。"""
    return round(KEYWORD_BASE_CONFIDENCE + KEYWORD_STEP_CONFIDENCE * match_count, 6)


def clamped_confidence(match_count: int) -> float:
    return min(1.0, linear_confidence(match_count))


def default_policy() -> ConfidencePolicy:
    """設定 (KEYWORD_CONFIDENCE_CLAMP) に応じたポリシーを返す。"""
    return clamped_confidence if KEYWORD_CONFIDENCE_CLAMP else linear_confidence


# ------------------------------------------------------------
# 2. キーワード一致
# ------------------------------------------------------------

def matched_keywords(text: str, category: Category) -> List[str]:
    if not text:
        return []
    return [kw for kw in category.keywords if kw and kw in text]


# ------------------------------------------------------------
# 3. メイン分類関数
# ------------------------------------------------------------

def classify_by_keywords(
    text: str,
    taxonomy: Taxonomy,
    policy: ConfidencePolicy = linear_confidence,
) -> List[AssignmentCandidate]:
    candidates: List[AssignmentCandidate] = []

    for category in taxonomy:
        hits = matched_keywords(text, category)
        if not hits:
            continue
        candidates.append(
            AssignmentCandidate(
                category=category.name,
                text=text,
                confidence=policy(len(hits)),
            )
        )

    return candidates
