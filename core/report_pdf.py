# core/report_pdf.py
# -*- coding: utf-8 -*-

from datetime import datetime
from typing import Optional, Union
from pathlib import Path
import io

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfgen import canvas

from inspection.report import build_report_markdown
from inspection.session_state import InspectionSession

# 日本語を描画するための CID フォント (reportlab 同梱)
JP_FONT = "HeiseiKakuGo-W5"
pdfmetrics.registerFont(UnicodeCIDFont(JP_FONT))

# 1 行あたりの最大文字数 (全角想定)
WRAP_WIDTH = 45


def _wrap(line: str, width: int = WRAP_WIDTH):
    if not line:
        return [""]
    return [line[i:i + width] for i in range(0, len(line), width)]


def build_inspection_report_pdf(
    session: InspectionSession,
    target: Union[str, Path, io.BytesIO],
    generated_at: Optional[datetime] = None,
):
    """
    視察レポートを PDF にして target (ファイルパス or BytesIO) に書き出す。
    """
    text = build_report_markdown(session, generated_at)

    c = canvas.Canvas(target if isinstance(target, io.BytesIO) else str(target), pagesize=A4)
    width, height = A4

    # 上部タイトル
    c.setFont(JP_FONT, 16)
    c.drawCentredString(width / 2.0, height - 25 * mm, "店舗視察レポート")

    # 本文
    c.setFont(JP_FONT, 10)

    y = height - 40 * mm
    # 先頭のタイトル行は上で描いたので飛ばす
    for raw_line in text.split("\n")[1:]:
        for line in _wrap(raw_line.replace("**", "")):
            if y < 20 * mm:  # ページ下端なら改ページ
                c.showPage()
                c.setFont(JP_FONT, 10)
                y = height - 25 * mm
            c.drawString(20 * mm, y, line)
            y -= 6 * mm

    c.showPage()
    c.save()
    return target


def render_inspection_report_pdf(
    session: InspectionSession,
    generated_at: Optional[datetime] = None,
) -> bytes:
    buf = io.BytesIO()
    build_inspection_report_pdf(session, buf, generated_at)
    return buf.getvalue()
