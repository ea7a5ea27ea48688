# core/report_xlsx.py
# -*- coding: utf-8 -*-

from datetime import datetime
from typing import Any, Iterable, List, Optional, Union
from pathlib import Path
import io

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from inspection.report import format_confidence
from inspection.session_state import InspectionSession


def _cell(v: Any) -> Any:
    if v is None:
        return ""
    # 数値はそのまま数値で残す
    if isinstance(v, (int, float)):
        return v
    return str(v).replace("\r", " ").strip()


def _fill(ws: Worksheet, rows: Iterable[List[Any]], widths: List[int]) -> None:
    for row in rows:
        ws.append([_cell(v) for v in row])
    for col, width in zip("ABCDEFGH", widths):
        ws.column_dimensions[col].width = width


def build_inspection_report_xlsx(
    session: InspectionSession,
    target: Union[str, Path, io.BytesIO],
    generated_at: Optional[datetime] = None,
):
    """
    視察レポートを Excel にして target (ファイルパス or BytesIO) に書き出す。

    シート構成
    - サマリー   : 店舗名 / 視察日時 / カテゴリ別件数 (全カテゴリ)
    - <カテゴリ> : 所見があるカテゴリだけ。時刻 / 内容 / 信頼度
    - AI分析     : インサイトか Q&A があるときだけ
    - 音声ログ   : 文字起こしを 1 件 1 行
    """
    generated_at = generated_at or datetime.now()
    findings = list(session.findings.items())

    wb = Workbook()
    ws = wb.active
    ws.title = "サマリー"
    _fill(
        ws,
        [
            ["店舗視察レポート"],
            [],
            ["店舗名", session.display_store_name],
            ["視察日時", generated_at.strftime("%Y/%m/%d %H:%M:%S")],
            [],
            ["カテゴリ別データ数"],
            *[[name, len(records)] for name, records in findings],
        ],
        [20, 30],
    )

    for name, records in findings:
        if not records:
            continue
        _fill(
            wb.create_sheet(title=name),
            [
                [name],
                [],
                ["時刻", "内容", "信頼度"],
                *[
                    [r.recorded_at.strftime("%H:%M:%S"), r.text, format_confidence(r.confidence)]
                    for r in records
                ],
            ],
            [12, 60, 10],
        )

    if session.insights or session.qa_pairs:
        _fill(
            wb.create_sheet(title="AI分析"),
            [
                ["AI分析結果"],
                [],
                ["自動インサイト"],
                [session.insights or "なし"],
                [],
                ["Q&A履歴"],
                ["質問", "回答", "時刻"],
                *[[qa.question, qa.answer, qa.asked_at.strftime("%H:%M:%S")] for qa in session.qa_pairs],
            ],
            [30, 60, 12],
        )

    _fill(
        wb.create_sheet(title="音声ログ"),
        [["音声ログ全文"], [], *[[e.text] for e in session.transcript_log.entries()]],
        [100],
    )

    wb.save(target if isinstance(target, io.BytesIO) else str(target))
    return target


def render_inspection_report_xlsx(
    session: InspectionSession,
    generated_at: Optional[datetime] = None,
) -> bytes:
    buf = io.BytesIO()
    build_inspection_report_xlsx(session, buf, generated_at)
    return buf.getvalue()
