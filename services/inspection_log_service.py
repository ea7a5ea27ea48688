# services/inspection_log_service.py
from typing import List, Optional

from sqlalchemy.orm import Session

from db.models.inspection_log import InspectionLog
from inspection.session_state import InvocationResult


def save_inspection_log(
    db: Session,
    session_id: str,
    result: InvocationResult,
    source: str,
    store_name: Optional[str] = None,
) -> InspectionLog:
    """
    パイプライン 1 回分の結果を inspection_logs テーブルに 1 行追加する。
    - session_id: フロントが使うセッション ID
    - result: InspectionSession.submit_observation の戻り値
    """
    row = InspectionLog(
        session_id=session_id,
        store_name=store_name,
        source=source,
        path=result.path,
        transcript=result.transcript,
        record_count=len(result.new_records),
        records_json=[
            {"category": r.category, "text": r.text, "confidence": r.confidence}
            for r in result.new_records
        ],
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def list_inspection_logs(db: Session, session_id: str) -> List[InspectionLog]:
    return (
        db.query(InspectionLog)
        .filter(InspectionLog.session_id == session_id)
        .order_by(InspectionLog.id)
        .all()
    )
