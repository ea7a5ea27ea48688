# routers/insight.py
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from core.logging import logger, log_event
from inspection import insight_agent
from inspection.errors import UpstreamModelError
from routers.session import require_session

router = APIRouter(tags=["insight"])


class InsightRequest(BaseModel):
    session_id: str


class QuestionRequest(BaseModel):
    session_id: str
    question: str


@router.post("/api/generate-insights", summary="AI インサイト生成")
def generate_insights(body: InsightRequest):
    session = require_session(body.session_id)
    if not session.has_findings():
        raise HTTPException(status_code=400, detail="分析対象のデータがありません")

    try:
        insights = insight_agent.generate_insights(session.snapshot())
    except UpstreamModelError as e:
        raise HTTPException(status_code=502, detail=f"インサイト生成中にエラーが発生しました: {e.reason}") from e

    session.record_insights(insights)
    logger.info("[insight] インサイト生成完了")
    log_event(body.session_id, {"type": "insights", "length": len(insights)})
    return {"insights": insights}


@router.post("/api/ask-question", summary="視察データへの質問応答")
def ask_question(body: QuestionRequest):
    session = require_session(body.session_id)
    question = body.question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="質問が必要です")

    try:
        answer = insight_agent.answer_question(session.snapshot(), question)
    except UpstreamModelError as e:
        raise HTTPException(status_code=502, detail=f"質問応答処理中にエラーが発生しました: {e.reason}") from e

    pair = session.record_answer(question, answer)
    log_event(body.session_id, {"type": "question", "question": question, "answer": answer})
    return {"answer": answer, "asked_at": pair.asked_at.isoformat()}
