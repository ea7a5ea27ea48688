# core/config.py
# -*- coding: utf-8 -*-

import os
from pathlib import Path

from dotenv import load_dotenv

# .env 読み込み (最初に実行)
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes")


def _env_optional_int(name: str):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return int(raw)


# --------------------------------
# パス / ログディレクトリ設定
# --------------------------------

# プロジェクトのルートディレクトリ
BASE_DIR = Path(__file__).resolve().parent.parent

# ログディレクトリ
LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "data" / "logs")))
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

# --------------------------------
# 外部 API キー / モデル設定
# --------------------------------

# OpenAI (文字起こし / 分類 / インサイト生成)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

# 環境変数がなければデフォルトを使う
WHISPER_MODEL = os.getenv("WHISPER_MODEL", "gpt-4o-mini-transcribe")
CHAT_MODEL = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")

TEMP_GLOBAL = 0.2      # インサイト / 質問応答
TEMP_CLASSIFIER = 0.0  # 分類 (決定的)

# --------------------------------
# 分類パイプライン設定
# --------------------------------

# 重複判定に使う先頭文字数
DEDUP_PREFIX_LENGTH = int(os.getenv("DEDUP_PREFIX_LENGTH", "50"))

# キーワード分類の信頼度: base + step × 一致数
KEYWORD_BASE_CONFIDENCE = float(os.getenv("KEYWORD_BASE_CONFIDENCE", "0.6"))
KEYWORD_STEP_CONFIDENCE = float(os.getenv("KEYWORD_STEP_CONFIDENCE", "0.1"))

# true にすると信頼度を 1.0 で頭打ちにする (既定は元の挙動どおり上限なし)
KEYWORD_CONFIDENCE_CLAMP = _env_bool("KEYWORD_CONFIDENCE_CLAMP", False)

# 何も分類できず文字起こしも空だったときに音声ログへ残す文言
FALLBACK_TRANSCRIPT = os.getenv("FALLBACK_TRANSCRIPT", "（音声を認識できませんでした）")

# 1 セッションあたりの上限 (未設定なら無制限)
FINDINGS_MAX_RECORDS = _env_optional_int("FINDINGS_MAX_RECORDS")
TRANSCRIPT_MAX_ENTRIES = _env_optional_int("TRANSCRIPT_MAX_ENTRIES")

# 音声アップロード上限 (50MB)
MAX_AUDIO_BYTES = int(os.getenv("MAX_AUDIO_BYTES", str(50 * 1024 * 1024)))

DEFAULT_STORE_NAME = "未設定"
