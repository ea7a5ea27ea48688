# core/logging.py
# -*- coding: utf-8 -*-

import sys
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from .config import LOG_DIR, LOG_LEVEL

# ------------------------------------------------
# ターミナル出力用 logger
# ------------------------------------------------
logger = logging.getLogger("store_inspection")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


# ------------------------------------------------
# セッション別イベントログ (JSONL)
# ------------------------------------------------

def _event_path(session_id: str):
    # session_id はクライアント由来なのでパス区切りを潰しておく
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in session_id)
    return LOG_DIR / f"{safe or 'unknown'}.jsonl"


def log_event(session_id: str, payload: Dict[str, Any]) -> None:
    """
    事後分析用の JSONL ログ。
    セッションごとに 1 行ずつ積み上がる。
    """
    record = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "session_id": session_id,
        **payload,
    }

    with _event_path(session_id).open("a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")


def read_events(session_id: str) -> List[Dict[str, Any]]:
    """log_event で書いた行を古い順に返す。壊れた行は飛ばす。"""
    path = _event_path(session_id)
    if not path.exists():
        return []

    events: List[Dict[str, Any]] = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                events.append(json.loads(line))
            except ValueError:
                logger.warning(f"[log] 壊れたイベント行を無視します: {path.name}")
    return events
