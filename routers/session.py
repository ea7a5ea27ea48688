# routers/session.py
from datetime import datetime
from urllib.parse import quote

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel

from core.logging import read_events
from core.report_pdf import render_inspection_report_pdf
from core.report_xlsx import render_inspection_report_xlsx
from inspection.report import build_report_filename, build_report_markdown
from inspection.session_state import InspectionSession
from inspection.taxonomy import DEFAULT_TAXONOMY
from services.inspection_session_service import drop_session, get_session

router = APIRouter(tags=["session"])


class StoreNameUpdate(BaseModel):
    store_name: str


def require_session(session_id: str) -> InspectionSession:
    session = get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="セッションが見つかりません")
    return session


def _attachment(filename: str) -> dict:
    return {"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"}


@router.get("/api/categories", summary="分類カテゴリ一覧")
def list_categories():
    return [
        {"name": c.name, "description": c.description, "keywords": list(c.keywords)}
        for c in DEFAULT_TAXONOMY
    ]


@router.get("/api/sessions/{session_id}", summary="所見と音声ログ")
def read_session(session_id: str):
    return {"session_id": session_id, **require_session(session_id).to_dict()}


@router.get("/api/sessions/{session_id}/events", summary="セッションのイベントログ (デバッグ用)")
def read_session_events(session_id: str):
    require_session(session_id)
    return read_events(session_id)


@router.post("/api/sessions/{session_id}/reset", summary="データクリア")
def reset_session(session_id: str):
    require_session(session_id).reset()
    return {"status": "ok", "session_id": session_id}


@router.put("/api/sessions/{session_id}/store-name", summary="視察店舗名の設定")
def update_store_name(session_id: str, body: StoreNameUpdate):
    session = require_session(session_id)
    session.store_name = body.store_name.strip()
    return {"status": "ok", "store_name": session.display_store_name}


@router.delete("/api/sessions/{session_id}", summary="セッション破棄")
def delete_session(session_id: str):
    if not drop_session(session_id):
        raise HTTPException(status_code=404, detail="セッションが見つかりません")
    return {"status": "ok"}


@router.get("/api/sessions/{session_id}/report.md", summary="Markdown レポート")
def download_report_markdown(session_id: str):
    session = require_session(session_id)
    now = datetime.now()
    return PlainTextResponse(
        build_report_markdown(session, now),
        media_type="text/markdown; charset=utf-8",
        headers=_attachment(build_report_filename(session, now, "md")),
    )


@router.get("/api/sessions/{session_id}/report.pdf", summary="PDF レポート")
def download_report_pdf(session_id: str):
    session = require_session(session_id)
    now = datetime.now()
    return Response(
        render_inspection_report_pdf(session, now),
        media_type="application/pdf",
        headers=_attachment(build_report_filename(session, now, "pdf")),
    )


@router.get("/api/sessions/{session_id}/report.xlsx", summary="Excel レポート")
def download_report_xlsx(session_id: str):
    session = require_session(session_id)
    now = datetime.now()
    return Response(
        render_inspection_report_xlsx(session, now),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=_attachment(build_report_filename(session, now, "xlsx")),
    )
