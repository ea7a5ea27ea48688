# -*- coding: utf-8 -*-
"""
inspection.insight_agent

集まった視察データ (InspectionSession.snapshot()) をもとに
- 自動インサイト (generate_insights)
- データへの質問応答 (answer_question)
を生成するモジュールです。

どちらも結果はモデルが返した文章をそのまま返すだけで、
分類結果や Findings Store には何も書き戻さない。
"""

from typing import Any, Dict, List

from .llm_client import call_chat


def format_findings(snapshot: Dict[str, Any]) -> str:
    blocks: List[str] = []
    for cat in snapshot.get("categories", []):
        items = "\n".join(cat.get("items", []))
        blocks.append(f"### {cat['name']}\n{items}")
    return "\n\n".join(blocks)


INSIGHT_SYSTEM_PROMPT = "あなたは小売業界の専門コンサルタントです。"

INSIGHT_INSTRUCTIONS = """
以下の観点から分析してください:

1. **競合優位性分析**
   - この店舗の強み・弱み
   - 競合との差別化ポイント

2. **改善提案**
   - 具体的な改善アクション
   - 優先度付きの提案

3. **顧客体験分析**
   - 客層・動線・満足度の観点
   - CX向上のポイント

4. **収益性向上策**
   - 売上向上のための施策
   - コスト最適化の提案

5. **リスク要因**
   - 懸念事項や注意すべき点

各項目について、具体的で実行可能な内容で回答してください。データに基づいた根拠も示してください。
""".strip()

QA_SYSTEM_PROMPT = "あなたは店舗視察データの専門アナリストです。以下のデータに基づいて質問に回答してください。"

QA_INSTRUCTIONS = """
回答の際は以下を心がけてください:
- データに基づいた具体的な回答
- 推測の場合は明示する
- 実用的で actionable な内容
- 簡潔で分かりやすい表現
- データが不足している場合は正直に伝える
""".strip()


def _data_section(snapshot: Dict[str, Any]) -> str:
    return (
        f"店舗名: {snapshot.get('store_name', '')}\n\n"
        f"視察データ:\n{format_findings(snapshot)}\n\n"
        f"音声ログ:\n{snapshot.get('transcript', '')}"
    )


def build_insight_prompt(snapshot: Dict[str, Any]) -> str:
    return (
        "以下の店舗視察データを分析し、実用的なビジネスインサイトを生成してください。\n\n"
        f"{_data_section(snapshot)}\n\n{INSIGHT_INSTRUCTIONS}"
    )


def build_question_prompt(snapshot: Dict[str, Any], question: str) -> str:
    return f"{_data_section(snapshot)}\n\n質問: {question}\n\n{QA_INSTRUCTIONS}\n\n回答:"


def generate_insights(snapshot: Dict[str, Any]) -> str:
    if not snapshot.get("categories"):
        raise ValueError("分析対象のデータがありません")

    return call_chat(
        [
            {"role": "system", "content": INSIGHT_SYSTEM_PROMPT},
            {"role": "user", "content": build_insight_prompt(snapshot)},
        ],
        max_tokens=2048,
    )


def answer_question(snapshot: Dict[str, Any], question: str) -> str:
    question = (question or "").strip()
    if not question:
        raise ValueError("質問が必要です")

    return call_chat(
        [
            {"role": "system", "content": QA_SYSTEM_PROMPT},
            {"role": "user", "content": build_question_prompt(snapshot, question)},
        ],
    )
