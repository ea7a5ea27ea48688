# -*- coding: utf-8 -*-
"""
視察レポート(テキスト版)を作るレイヤー。

- 入力: InspectionSession
- 出力: Markdown のレポート本文 (店舗名 / 視察日時 / カテゴリ別所見 /
  AI 分析結果 / Q&A 履歴 / 音声ログ全文)
"""

from datetime import datetime
from typing import List, Optional

from .findings_store import ObservationRecord
from .session_state import InspectionSession


def format_confidence(confidence: float) -> str:
    return f"{round(confidence * 100)}%"


def format_record_line(record: ObservationRecord) -> str:
    ts = record.recorded_at.strftime("%H:%M:%S")
    return f"- **{ts}:** {record.text} (信頼度: {format_confidence(record.confidence)})"


def build_report_markdown(
    session: InspectionSession,
    generated_at: Optional[datetime] = None,
) -> str:
    generated_at = generated_at or datetime.now()

    lines: List[str] = [
        "# 店舗視察レポート",
        "",
        f"**店舗名:** {session.display_store_name}",
        f"**視察日時:** {generated_at.strftime('%Y/%m/%d %H:%M:%S')}",
        "",
    ]

    # 所見があるカテゴリだけ出す
    for name, records in session.findings.items():
        if not records:
            continue
        lines.append(f"## {name}")
        lines.append("")
        lines.extend(format_record_line(r) for r in records)
        lines.append("")

    if session.insights:
        lines += ["## AI分析結果", "", session.insights, ""]

    if session.qa_pairs:
        lines += ["## Q&A履歴", ""]
        for qa in session.qa_pairs:
            lines.append(f"**Q:** {qa.question}")
            lines.append(f"**A:** {qa.answer}")
            lines.append("")

    lines += ["## 音声ログ全文", "", session.transcript_log.full_text()]

    return "\n".join(lines)


def build_report_filename(session: InspectionSession, generated_at: datetime, ext: str) -> str:
    return f"店舗視察_{session.display_store_name}_{int(generated_at.timestamp())}.{ext}"
