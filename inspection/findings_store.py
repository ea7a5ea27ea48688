# -*- coding: utf-8 -*-
"""
findings_store.py

視察セッションの状態のうち「分類結果」と「音声ログ」を保持するモジュールです。

🎯 主な役割
--------------------------------------
1) AssignmentCandidate
   - extractor / キーワード分類が出す「まだ保存していない」分類候補

2) ObservationRecord
   - Findings Store に実際に積まれる 1 件の所見 (不変)
   - recorded_at はマージ時刻 (解析時刻ではない)

3) FindingsStore
   - カテゴリ名 → 所見リスト (登録順・追記のみ)
   - append_all は検証をすべて終えてから一括追記する (途中までの追記はしない)

4) TranscriptLog
   - 分類結果に関係なく、処理したテキストを 1 件ずつ積む追記専用ログ
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import StoreWriteError
from .taxonomy import Taxonomy


# ---------------------------------------------------------
# データ構造定義
# ---------------------------------------------------------

@dataclass(frozen=True)
class AssignmentCandidate:
    category: str
    text: str
    confidence: float


@dataclass(frozen=True)
class ObservationRecord:
    """
    分類済みの所見 1 件。
    category は必ず Taxonomy に存在する名前。
    """
    category: str
    text: str
    confidence: float
    recorded_at: datetime


@dataclass(frozen=True)
class TranscriptEntry:
    text: str
    recorded_at: datetime


# ---------------------------------------------------------
# Findings Store
# ---------------------------------------------------------

class FindingsStore:
    """
    カテゴリごとの所見リスト。

    - キーはタクソノミーの登録順で最初から全部作っておく
    - 追記のみ。並べ替えや書き換えはしない
    - 全消去は clear() (セッション所有者のリセット操作) だけ
    """

    def __init__(self, taxonomy: Taxonomy, max_records: Optional[int] = None):
        self._taxonomy = taxonomy
        self._max_records = max_records
        self._lock = threading.Lock()
        self._items: Dict[str, List[ObservationRecord]] = {
            name: [] for name in taxonomy.names()
        }

    @property
    def taxonomy(self) -> Taxonomy:
        return self._taxonomy

    def total(self) -> int:
        return sum(len(v) for v in self._items.values())

    def can_accept(self, count: int) -> bool:
        if self._max_records is None:
            return True
        return self.total() + count <= self._max_records

    def append_all(self, records: Iterable[ObservationRecord]) -> None:
        """全件の検証が通ったときだけまとめて追記する。"""
        batch = list(records)
        for rec in batch:
            if rec.category not in self._items:
                raise ValueError(f"未知のカテゴリです: {rec.category}")

        with self._lock:
            if not self.can_accept(len(batch)):
                raise StoreWriteError(
                    f"所見の保存上限({self._max_records}件)を超えるため追記できません"
                )
            for rec in batch:
                self._items[rec.category].append(rec)

    def records(self, category: str) -> Tuple[ObservationRecord, ...]:
        return tuple(self._items.get(category, ()))

    def items(self) -> List[Tuple[str, Tuple[ObservationRecord, ...]]]:
        return [(name, tuple(recs)) for name, recs in self._items.items()]

    def category_names(self) -> List[str]:
        return list(self._items.keys())

    def snapshot(self) -> Dict[str, List[str]]:
        """インサイト / 質問応答向け: 所見があるカテゴリだけ、本文のリストにする。"""
        return {
            name: [r.text for r in recs]
            for name, recs in self._items.items()
            if recs
        }

    def clear(self) -> None:
        with self._lock:
            for recs in self._items.values():
                recs.clear()


# ---------------------------------------------------------
# 音声ログ
# ---------------------------------------------------------

class TranscriptLog:
    def __init__(self, max_entries: Optional[int] = None):
        self._entries: List[TranscriptEntry] = []
        self._max_entries = max_entries
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def can_accept(self) -> bool:
        if self._max_entries is None:
            return True
        return len(self._entries) < self._max_entries

    def append(self, text: str, at: datetime) -> TranscriptEntry:
        entry = TranscriptEntry(text=text, recorded_at=at)
        with self._lock:
            if not self.can_accept():
                raise StoreWriteError(
                    f"音声ログの上限({self._max_entries}件)を超えるため追記できません"
                )
            self._entries.append(entry)
        return entry

    def entries(self) -> Tuple[TranscriptEntry, ...]:
        return tuple(self._entries)

    def full_text(self) -> str:
        # 画面側と同じく、発話ごとに空行で区切る
        return "\n\n".join(e.text for e in self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
