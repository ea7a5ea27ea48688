# services/inspection_session_service.py
# -*- coding: utf-8 -*-
"""
視察セッション(InspectionSession)のメモリ上レジストリ。

- session_id ごとに 1 つの InspectionSession (= 1 つの Findings Store)
- session_id がなければ uuid を発行して新規作成
"""

import threading
import uuid
from typing import Dict, Optional, Tuple

from core.logging import log_event
from inspection.session_state import InspectionSession
from inspection.taxonomy import DEFAULT_TAXONOMY, Taxonomy

INSPECTION_SESSIONS: Dict[str, InspectionSession] = {}
_registry_lock = threading.Lock()


def get_or_create_session(
    session_id: Optional[str] = None,
    store_name: Optional[str] = None,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> Tuple[str, InspectionSession]:
    session_id = (session_id or "").strip() or str(uuid.uuid4())

    with _registry_lock:
        session = INSPECTION_SESSIONS.get(session_id)
        if session is None:
            session = InspectionSession(taxonomy=taxonomy, store_name=store_name or "")
            INSPECTION_SESSIONS[session_id] = session
            log_event(session_id, {"type": "session_start"})

    if store_name:
        session.store_name = store_name
    return session_id, session


def get_session(session_id: str) -> Optional[InspectionSession]:
    return INSPECTION_SESSIONS.get(session_id)


def drop_session(session_id: str) -> bool:
    with _registry_lock:
        return INSPECTION_SESSIONS.pop(session_id, None) is not None
