# -*- coding: utf-8 -*-
"""
店舗視察エンジン — 外部から呼ぶ入口

- run_pipeline_once(session, raw_text)
    モデル応答 or 手入力テキスト 1 件を分類してセッションにマージする。
- run_with_model(session, text)
    テキストを分類モデルに投げ、返ってきた生テキストを run_pipeline_once に渡す。
- run_with_audio(session, audio_bytes, filename)
    文字起こし → run_with_model。

モデル呼び出しが失敗したとき (UpstreamModelError) はセッションに一切触れずに
そのまま呼び出し側へ投げる。
"""

from typing import Optional

from core.logging import logger, log_event
from .classification_agent import request_classification
from .errors import UpstreamModelError
from .llm_client import transcribe_bytes
from .session_state import InspectionSession, InvocationResult


def _log_result(session_id: Optional[str], source: str, raw_text: str, result: InvocationResult) -> None:
    if not session_id:
        return
    log_event(
        session_id,
        {
            "type": "observation",
            "source": source,
            "raw_text": raw_text,
            "path": result.path,
            "transcript": result.transcript,
            "new_records": [
                {"category": r.category, "text": r.text, "confidence": r.confidence}
                for r in result.new_records
            ],
        },
    )


def run_pipeline_once(
    session: InspectionSession,
    raw_text: str,
    session_id: Optional[str] = None,
    source: str = "text",
) -> InvocationResult:
    result = session.submit_observation(raw_text)
    _log_result(session_id, source, raw_text, result)
    return result


def run_with_model(
    session: InspectionSession,
    text: str,
    session_id: Optional[str] = None,
    source: str = "text+model",
) -> InvocationResult:
    try:
        raw_response = request_classification(text, session.taxonomy)
    except UpstreamModelError as e:
        logger.warning(f"[engine] 分類モデル呼び出し失敗: {e.reason}")
        if session_id:
            log_event(session_id, {"type": "upstream_error", "source": source, "reason": e.reason})
        raise

    logger.debug(f"[engine] モデル応答: {raw_response[:200]}")
    return run_pipeline_once(session, raw_response, session_id=session_id, source=source)


def run_with_audio(
    session: InspectionSession,
    audio_bytes: bytes,
    filename: str,
    session_id: Optional[str] = None,
) -> InvocationResult:
    try:
        text = transcribe_bytes(audio_bytes, filename)
    except UpstreamModelError as e:
        if session_id:
            log_event(session_id, {"type": "upstream_error", "source": "audio", "reason": e.reason})
        raise

    # 無音などで何も取れなかったときはモデルに投げず、そのまま
    # パイプラインに通してフォールバック文言を音声ログに残す
    if not text:
        return run_pipeline_once(session, text, session_id=session_id, source="audio")
    return run_with_model(session, text, session_id=session_id, source="audio")
