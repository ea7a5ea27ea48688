# -*- coding: utf-8 -*-
"""
inspection.llm_client

OpenAI Chat / 音声文字起こしを呼び出す共通ラッパーです。

- 環境設定: .env の OPENAI_API_KEY からクライアントを作る (初回呼び出し時)
- call_chat(messages, model, temperature, max_tokens): Chat API ラッパー
- transcribe_bytes(audio_bytes, filename): 音声 → テキスト

失敗(キー未設定 / クォータ / 安全フィルタ / 通信)はすべて UpstreamModelError にして
呼び出し側へ返す。分類パイプラインはこのモジュールを直接呼ばない。
"""

import io
from typing import List, Dict, Optional

from openai import OpenAI, OpenAIError

from core.config import OPENAI_API_KEY, CHAT_MODEL, WHISPER_MODEL, TEMP_GLOBAL
from core.logging import logger
from .errors import UpstreamModelError

_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    global _client
    if _client is None:
        if not OPENAI_API_KEY:
            raise UpstreamModelError(".env に OPENAI_API_KEY がありません。")
        _client = OpenAI(api_key=OPENAI_API_KEY)
    return _client


def is_configured() -> bool:
    return bool(OPENAI_API_KEY)


# -------------------- OpenAI Chat 呼び出しラッパー --------------------
def call_chat(
    messages: List[Dict[str, str]],
    model: str = CHAT_MODEL,
    temperature: float = TEMP_GLOBAL,
    max_tokens: int = 1024,
) -> str:
    """OpenAI Chat 呼び出しラッパー。"""
    client = get_client()
    try:
        resp = client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except OpenAIError as e:
        logger.warning(f"[llm_client] OpenAI API error: {e}")
        raise UpstreamModelError(f"モデル呼び出しに失敗しました: {e}") from e

    choice = resp.choices[0]
    if choice.finish_reason == "content_filter":
        raise UpstreamModelError("安全フィルタにより応答が拒否されました")

    content = choice.message.content
    if content is None:
        refusal = getattr(choice.message, "refusal", None)
        raise UpstreamModelError(f"モデルが応答を返しませんでした: {refusal or 'empty'}")
    return content.strip()


# -------------------- 音声文字起こし --------------------
def transcribe_bytes(audio_bytes: bytes, filename: str = "recording.webm") -> str:
    client = get_client()
    buf = io.BytesIO(audio_bytes)
    buf.name = filename  # SDK はファイル名の拡張子で形式を判定する
    try:
        resp = client.audio.transcriptions.create(
            model=WHISPER_MODEL,
            file=buf,
            language="ja",
        )
    except OpenAIError as e:
        logger.warning(f"[llm_client] transcription error: {e}")
        raise UpstreamModelError(f"音声認識に失敗しました: {e}") from e
    return (resp.text or "").strip()
