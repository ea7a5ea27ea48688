# routers/observation.py
# -*- coding: utf-8 -*-

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import MAX_AUDIO_BYTES
from core.logging import logger
from db.session import get_db, USE_DB
from inspection.errors import StoreWriteError, UpstreamModelError
from inspection.inspection_engine import run_pipeline_once, run_with_audio, run_with_model
from inspection.session_state import InspectionSession, InvocationResult
from services.inspection_log_service import save_inspection_log
from services.inspection_session_service import get_or_create_session

router = APIRouter(tags=["observation"])


class ObservationTextRequest(BaseModel):
    """
    手入力 / 外部 STT 済みテキストの送信。
    - use_model=False: テキストをそのままパイプラインへ (キーワード分類)
    - use_model=True : 分類モデルを通してからパイプラインへ
    """
    session_id: Optional[str] = Field(
        default=None,
        description="前回受け取ったセッション ID。初回は空でよい。",
    )
    text: str = Field(..., description="視察メモ", examples=["値段が安い"])
    store_name: Optional[str] = None
    use_model: bool = False


class ObservationRecordOut(BaseModel):
    category: str
    text: str
    confidence: float
    recorded_at: str


class ObservationResponse(BaseModel):
    session_id: str
    transcript: str
    path: str
    new_records: List[ObservationRecordOut]


def _to_response(session_id: str, result: InvocationResult) -> ObservationResponse:
    return ObservationResponse(
        session_id=session_id,
        transcript=result.transcript,
        path=result.path,
        new_records=[
            ObservationRecordOut(
                category=r.category,
                text=r.text,
                confidence=r.confidence,
                recorded_at=r.recorded_at.isoformat(),
            )
            for r in result.new_records
        ],
    )


def _persist(db: Session, session_id: str, session: InspectionSession, result: InvocationResult, source: str) -> None:
    """
    DB への記録は付随処理。
    セッションへの反映はもう終わっているので、失敗してもリクエスト自体は成功で返す。
    """
    if not USE_DB:
        return
    try:
        save_inspection_log(db, session_id, result, source, store_name=session.store_name or None)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"[observation] inspection_logs への保存に失敗しました session={session_id}: {e}")


def http_error(e: Exception) -> HTTPException:
    """上流モデル / 保存失敗を HTTP エラーにする。どちらも分類ゼロ件として扱う。"""
    if isinstance(e, UpstreamModelError):
        return HTTPException(status_code=502, detail=f"分類は行われませんでした: {e.reason}")
    return HTTPException(status_code=507, detail=f"分類は行われませんでした: {e}")


@router.post(
    "/api/observations/text",
    response_model=ObservationResponse,
    summary="テキストの視察メモを分類",
)
def submit_text(body: ObservationTextRequest, db: Session = Depends(get_db)):
    session_id, session = get_or_create_session(body.session_id, body.store_name)
    source = "text+model" if body.use_model else "text"

    try:
        if body.use_model:
            result = run_with_model(session, body.text, session_id=session_id)
        else:
            result = run_pipeline_once(session, body.text, session_id=session_id)
    except (UpstreamModelError, StoreWriteError) as e:
        raise http_error(e) from e

    _persist(db, session_id, session, result, source)
    return _to_response(session_id, result)


# ============================================================
# 音声アップロード (multipart/form-data)
# ============================================================

async def _parse_audio_request(request: Request) -> Dict[str, Any]:
    """
    - multipart/form-data のパース
    - session_id の取り出し (フォーム / ヘッダー / クエリ)
    - 音声バイト列 / ファイル名の取り出し
    """
    try:
        form = await request.form()
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"フォーム解析エラー: {e}")

    session_id = (
        form.get("session_id")
        or request.headers.get("X-Session-ID")
        or request.query_params.get("session_id")
    )

    upload = form.get("audio") or form.get("file")
    if upload is None or isinstance(upload, str):
        raise HTTPException(status_code=400, detail="音声ファイルが必要です")

    audio_bytes = await upload.read()
    if not audio_bytes:
        raise HTTPException(status_code=400, detail="音声ファイルが空です")
    if len(audio_bytes) > MAX_AUDIO_BYTES:
        raise HTTPException(status_code=413, detail="ファイルサイズが大きすぎます")

    return {
        "session_id": session_id,
        "store_name": form.get("store_name"),
        "audio_bytes": audio_bytes,
        "filename": getattr(upload, "filename", None) or "recording.webm",
    }


@router.post(
    "/api/transcribe",
    response_model=ObservationResponse,
    summary="音声を文字起こしして分類",
)
async def transcribe(request: Request, db: Session = Depends(get_db)):
    parsed = await _parse_audio_request(request)
    # セッション作成 (イベントログ書き込み) と DB 保存はブロッキングなのでスレッドで回す
    session_id, session = await run_in_threadpool(
        get_or_create_session, parsed["session_id"], parsed["store_name"]
    )

    logger.info(f"[transcribe] session={session_id} bytes={len(parsed['audio_bytes'])}")

    try:
        result = await run_in_threadpool(
            run_with_audio,
            session,
            parsed["audio_bytes"],
            parsed["filename"],
            session_id,
        )
    except (UpstreamModelError, StoreWriteError) as e:
        raise http_error(e) from e

    await run_in_threadpool(_persist, db, session_id, session, result, "audio")
    return _to_response(session_id, result)
