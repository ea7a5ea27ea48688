# -*- coding: utf-8 -*-
"""
session_state.py

1 回の店舗視察(セッション)の状態を管理するモジュールです。

🎯 主な役割
--------------------------------------
1) submit_observation(raw_text)
   - pipeline.classify_response で分類
   - 重複除去 / 未知カテゴリ除外 → ObservationRecord 化
   - 音声ログの空きを確認してから所見を一括追記する
     (どちらかが書けないときは何も変えずに StoreWriteError)
   - 音声ログには分類結果に関係なく毎回 1 件追記

2) reset()
   - 所見 / 音声ログ / インサイト / Q&A をまとめて消す

3) snapshot()
   - インサイト生成・質問応答に渡す読み取り専用のまとめ

同じセッションへの呼び出しはロックで 1 件ずつ処理する。
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from core.config import (
    DEFAULT_STORE_NAME,
    FINDINGS_MAX_RECORDS,
    TRANSCRIPT_MAX_ENTRIES,
)
from core.logging import logger
from .classifier import ConfidencePolicy
from .errors import StoreWriteError
from .findings_store import FindingsStore, ObservationRecord, TranscriptLog
from .merger import merge_into_store
from .pipeline import ClassificationPath, classify_response
from .taxonomy import DEFAULT_TAXONOMY, Taxonomy


# ---------------------------------------------------------
# データ構造定義
# ---------------------------------------------------------

@dataclass(frozen=True)
class InvocationResult:
    """
    1 回の送信に対する結果。分類がまったくできなくても必ずこの形で返す。
    """
    transcript: str
    new_records: List[ObservationRecord] = field(default_factory=list)
    path: ClassificationPath = "fallback"


@dataclass(frozen=True)
class QAPair:
    question: str
    answer: str
    asked_at: datetime


# ---------------------------------------------------------
# メインクラス
# ---------------------------------------------------------

class InspectionSession:
    def __init__(
        self,
        taxonomy: Taxonomy = DEFAULT_TAXONOMY,
        store_name: str = "",
        clock: Callable[[], datetime] = datetime.now,
        policy: Optional[ConfidencePolicy] = None,
        max_records: Optional[int] = FINDINGS_MAX_RECORDS,
        max_transcripts: Optional[int] = TRANSCRIPT_MAX_ENTRIES,
    ):
        self.taxonomy = taxonomy
        self.store_name = store_name
        self.findings = FindingsStore(taxonomy, max_records=max_records)
        self.transcript_log = TranscriptLog(max_entries=max_transcripts)

        # 元アプリの画面状態のうち、レポートに載るもの
        self.insights: str = ""
        self.qa_pairs: List[QAPair] = []

        self._clock = clock
        self._policy = policy
        self._lock = threading.Lock()

    @property
    def display_store_name(self) -> str:
        return self.store_name or DEFAULT_STORE_NAME

    # -----------------------------------------------------
    # 分類 + マージ
    # -----------------------------------------------------

    def submit_observation(self, raw_text: str) -> InvocationResult:
        with self._lock:
            classification = classify_response(raw_text, self.taxonomy, self._policy)

            # 所見を書く前に音声ログの空きを確認する (所見側は append_all が一括で判定)
            if not self.transcript_log.can_accept():
                raise StoreWriteError("音声ログの保存上限に達しました")

            records = merge_into_store(classification.candidates, self.findings, self._clock)
            self.transcript_log.append(classification.transcript, self._clock())

        logger.info(
            f"[session] path={classification.path} "
            f"candidates={len(classification.candidates)} stored={len(records)}"
        )
        return InvocationResult(
            transcript=classification.transcript,
            new_records=records,
            path=classification.path,
        )

    # -----------------------------------------------------
    # リセット / インサイト / Q&A
    # -----------------------------------------------------

    def reset(self) -> None:
        with self._lock:
            self.findings.clear()
            self.transcript_log.clear()
            self.insights = ""
            self.qa_pairs = []

    def record_insights(self, text: str) -> None:
        self.insights = text

    def record_answer(self, question: str, answer: str) -> QAPair:
        pair = QAPair(question=question, answer=answer, asked_at=self._clock())
        self.qa_pairs.append(pair)
        return pair

    def has_findings(self) -> bool:
        return self.findings.total() > 0

    def snapshot(self) -> Dict[str, Any]:
        """
        インサイト / 質問応答に渡す形:
        {"store_name", "categories": [{"name", "items": [text, ...]}], "transcript"}
        """
        return {
            "store_name": self.display_store_name,
            "categories": [
                {"name": name, "items": texts}
                for name, texts in self.findings.snapshot().items()
            ],
            "transcript": self.transcript_log.full_text(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """API / デバッグ表示用。"""
        return {
            "store_name": self.display_store_name,
            "findings": {
                name: [
                    {
                        "text": r.text,
                        "confidence": r.confidence,
                        "recorded_at": r.recorded_at.isoformat(),
                    }
                    for r in recs
                ]
                for name, recs in self.findings.items()
            },
            "transcript": [
                {"text": e.text, "recorded_at": e.recorded_at.isoformat()}
                for e in self.transcript_log.entries()
            ],
            "insights": self.insights,
            "qa_pairs": [
                {"question": qa.question, "answer": qa.answer, "asked_at": qa.asked_at.isoformat()}
                for qa in self.qa_pairs
            ],
        }
