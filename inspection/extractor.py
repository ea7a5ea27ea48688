# -*- coding: utf-8 -*-
"""
inspection.extractor

外部モデルの応答テキストから、埋め込まれた JSON ペイロード

    {
      "transcript": "...",
      "categorized_items": [
        {"category": "...", "text": "...", "confidence": 0.8}
      ]
    }

を取り出すモジュールです。

- 戻り値は Structured | ExtractionFailure のどちらか。
  解析失敗は想定内の分岐なので、例外は呼び出し側に投げない。
- カテゴリ名の妥当性はここでは見ない (マージ段階で捨てる)。
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple, Union

from core.logging import logger
from .findings_store import AssignmentCandidate

DEFAULT_ITEM_CONFIDENCE = 1.0

# ```json ... ``` / ``` ... ``` の囲みを外す
_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?|```")


@dataclass(frozen=True)
class Structured:
    transcript: str
    items: List[AssignmentCandidate] = field(default_factory=list)


@dataclass(frozen=True)
class ExtractionFailure:
    reason: str


ExtractionResult = Union[Structured, ExtractionFailure]


# ------------------------------------------------------------
# 1. 前処理 / JSON 範囲の探索
# ------------------------------------------------------------

def strip_code_fences(text: str) -> str:
    if not text:
        return ""
    return _FENCE_RE.sub("", text).strip()


def iter_balanced_spans(text: str) -> Iterator[Tuple[int, int]]:
    """
    最上位の {...} の範囲 (start, end) を前から順に返す。
    文字列リテラル内の括弧とエスケープは数えない。
    閉じていない { が残ったらそこで終わり。
    """
    depth = 0
    start = -1
    in_string = False
    escaped = False

    for i, ch in enumerate(text):
        if depth == 0:
            if ch == "{":
                depth = 1
                start = i
                in_string = False
                escaped = False
            continue

        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                yield start, i + 1


def _decode_object(text: str) -> Optional[dict]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def find_payload(text: str) -> Optional[dict]:
    """
    JSON オブジェクトを探す。
    1) テキスト全体をそのまま decode
    2) 最上位の {...} を前から順に decode し、最初に dict になったものを採用
    """
    whole = _decode_object(text)
    if whole is not None:
        return whole

    for start, end in iter_balanced_spans(text):
        data = _decode_object(text[start:end])
        if data is not None:
            return data
    return None


# ------------------------------------------------------------
# 2. 項目の正規化
# ------------------------------------------------------------

def _coerce_confidence(value: Any) -> float:
    """confidence が無い / null / 有限の数値でないときは 1.0。"""
    if value is None or isinstance(value, bool):
        return DEFAULT_ITEM_CONFIDENCE

    number: Optional[float] = None
    if isinstance(value, (int, float, str)):
        try:
            number = float(value.strip() if isinstance(value, str) else value)
        except (ValueError, OverflowError):
            number = None

    # NaN / Infinity はレポートの % 表示で壊れるので数値として扱わない
    if number is not None and math.isfinite(number):
        return number
    logger.warning(f"[extractor] confidence が有限の数値ではないため 1.0 とみなします: {value!r}")
    return DEFAULT_ITEM_CONFIDENCE


def normalize_items(raw_items: Any) -> List[AssignmentCandidate]:
    if not isinstance(raw_items, list):
        return []

    candidates: List[AssignmentCandidate] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            logger.warning(f"[extractor] オブジェクトではない項目を無視します: {raw!r}")
            continue
        category = raw.get("category")
        text = raw.get("text")
        if not isinstance(category, str) or not isinstance(text, str):
            logger.warning(f"[extractor] category/text が文字列ではない項目を無視します: {raw!r}")
            continue
        candidates.append(
            AssignmentCandidate(
                category=category,
                text=text,
                confidence=_coerce_confidence(raw.get("confidence")),
            )
        )
    return candidates


# ------------------------------------------------------------
# 3. メイン関数
# ------------------------------------------------------------

def extract_structured(raw_text: str) -> ExtractionResult:
    """モデル応答から (transcript, items) を取り出す。失敗は ExtractionFailure。"""
    if not raw_text or not raw_text.strip():
        return ExtractionFailure("empty response")

    cleaned = strip_code_fences(raw_text)
    payload = find_payload(cleaned)
    if payload is None:
        return ExtractionFailure("no decodable JSON object")

    transcript = payload.get("transcript")
    if transcript is None:
        transcript = raw_text
    elif not isinstance(transcript, str):
        return ExtractionFailure("transcript is not a string")

    return Structured(
        transcript=transcript,
        items=normalize_items(payload.get("categorized_items")),
    )
