# -*- coding: utf-8 -*-
"""
inspection.classification_agent

視察の発話テキストをカテゴリ分けしてもらうための小さな LLM エージェント。

入力:
- text     : 文字起こし結果、または手入力のメモ
- taxonomy : 分類対象のカテゴリ

出力:
- モデルが返した生テキスト (JSON が含まれているはずだが保証はない)

ここでは解析しない。解析とフォールバックは extractor / pipeline の役目。
"""

from typing import Dict, List

from core.config import CHAT_MODEL, TEMP_CLASSIFIER
from .llm_client import call_chat
from .taxonomy import Taxonomy


def build_classification_prompt(taxonomy: Taxonomy) -> str:
    category_lines = "\n".join(f"- {c.name}: {c.description}" for c in taxonomy)
    return f"""
以下は店舗視察の記録です。内容を日本語のテキストとして整理し、次のカテゴリに分類してください。

カテゴリ:
{category_lines}

出力形式（必ずJSON形式で応答してください）:
{{
  "transcript": "記録の完全なテキスト",
  "categorized_items": [
    {{
      "category": "カテゴリ名",
      "text": "該当する発言内容",
      "confidence": 0.8
    }}
  ]
}}

重要な注意事項:
- 視察に関係しない内容や不明瞭な部分は除外してください
- カテゴリに該当しない内容は無視してください
- 必ずJSON形式で応答してください
- confidenceは0.0-1.0の範囲で設定してください
""".strip()


def request_classification(text: str, taxonomy: Taxonomy) -> str:
    messages: List[Dict[str, str]] = [
        {"role": "system", "content": build_classification_prompt(taxonomy)},
        {"role": "user", "content": text},
    ]
    return call_chat(
        messages,
        model=CHAT_MODEL,
        temperature=TEMP_CLASSIFIER,
    )
