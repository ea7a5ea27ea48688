# -*- coding: utf-8 -*-
"""
inspection.merger

分類候補の重複除去と、Findings Store へのマージを担当します。

- dedup_key: (category, text の先頭 50 文字)
  ハッシュではなく切り詰めなので、先頭 50 文字が同じなら後半が違っても
  同一とみなす (おおまかな重複除去)。
- deduplicate: 1 回の呼び出しで出た候補の中だけで重複を除く。
  すでに Store にある所見は見ないので、同じ文を別の呼び出しで送れば
  2 件目として残る。
- build_records: 未知カテゴリは警告ログを出して捨て、残りを ObservationRecord にする。
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, List, Set, Tuple

from core.config import DEDUP_PREFIX_LENGTH, FALLBACK_TRANSCRIPT
from core.logging import logger
from .findings_store import AssignmentCandidate, FindingsStore, ObservationRecord
from .taxonomy import Taxonomy

Clock = Callable[[], datetime]


def dedup_key(
    candidate: AssignmentCandidate,
    prefix_length: int = DEDUP_PREFIX_LENGTH,
) -> Tuple[str, str]:
    return candidate.category, candidate.text[:prefix_length]


def deduplicate(
    candidates: Iterable[AssignmentCandidate],
    prefix_length: int = DEDUP_PREFIX_LENGTH,
) -> List[AssignmentCandidate]:
    """同じキーの候補は最初の 1 件だけ残す (順序は維持)。"""
    seen: Set[Tuple[str, str]] = set()
    survivors: List[AssignmentCandidate] = []

    for cand in candidates:
        key = dedup_key(cand, prefix_length)
        if key in seen:
            continue
        seen.add(key)
        survivors.append(cand)

    return survivors


def build_records(
    candidates: Iterable[AssignmentCandidate],
    taxonomy: Taxonomy,
    now: datetime,
) -> List[ObservationRecord]:
    records: List[ObservationRecord] = []

    for cand in candidates:
        if not taxonomy.has(cand.category):
            logger.warning(f"[merger] 未知のカテゴリを無視します: {cand.category!r}")
            continue
        records.append(
            ObservationRecord(
                category=cand.category,
                text=cand.text,
                confidence=cand.confidence,
                recorded_at=now,
            )
        )

    return records


def prepare_records(
    candidates: Iterable[AssignmentCandidate],
    taxonomy: Taxonomy,
    now: datetime,
) -> List[ObservationRecord]:
    """重複除去 → レコード化 (Store にはまだ書かない)。"""
    return build_records(deduplicate(candidates), taxonomy, now)


def merge_into_store(
    candidates: Iterable[AssignmentCandidate],
    store: FindingsStore,
    clock: Clock = datetime.now,
) -> List[ObservationRecord]:
    records = prepare_records(candidates, store.taxonomy, clock())
    store.append_all(records)
    return records


def resolve_transcript(transcript: str, candidates: List[AssignmentCandidate]) -> str:
    """何も分類できず文字起こしも空なら、空文字ではなく固定文言にする。"""
    if not candidates and not (transcript or "").strip():
        return FALLBACK_TRANSCRIPT
    return transcript
