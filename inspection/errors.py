# -*- coding: utf-8 -*-
"""
inspection.errors

呼び出し側まで届くエラーだけをここで定義する。

- 構造化レスポンスの解析失敗 (ExtractionFailure) は例外ではなく
  extractor の戻り値の一方の分岐として扱う。
- 未知カテゴリ (UnknownCategoryReference) は警告ログを出して捨てるだけ。
"""


class UpstreamModelError(Exception):
    """外部モデル呼び出しの失敗 (キー未設定 / クォータ / 安全フィルタ / 通信)。"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class StoreWriteError(Exception):
    """Findings Store / 音声ログがこれ以上追記できない (容量超過)。"""
