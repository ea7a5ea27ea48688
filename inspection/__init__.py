# -*- coding: utf-8 -*-
"""
inspection パッケージ

店舗視察アプリで使う「観察メモの分類・集計エンジン」の中核ロジックです。

外部(app_fastapi.py など)からは主に次を使います。

- InspectionSession:
    1 回の視察の所見(Findings Store)と音声ログを持つ状態オブジェクト。
- run_pipeline_once(session, raw_text):
    モデル応答または手入力テキスト 1 件を分類し、セッションにマージします。

細かいロジックは次のモジュールに分かれています。

- taxonomy          : カテゴリ定義 (名前 / 説明 / キーワード)
- extractor         : モデル応答に埋め込まれた JSON の取り出し
- classifier        : キーワードによるフォールバック分類と信頼度ポリシー
- merger            : 重複除去と Findings Store へのマージ
- findings_store    : 所見 / 音声ログのデータ構造
- pipeline          : 構造化経路 / フォールバック経路の振り分け
- session_state     : 視察セッション
- llm_client        : OpenAI Chat / 文字起こしラッパー
- classification_agent, insight_agent : モデルへのプロンプト
- report            : Markdown レポート
"""

from .inspection_engine import run_pipeline_once
from .session_state import InspectionSession, InvocationResult

__all__ = ["run_pipeline_once", "InspectionSession", "InvocationResult"]
