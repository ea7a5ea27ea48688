# app_fastapi.py
# -*- coding: utf-8 -*-

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.logging import logger
from db.session import USE_DB, DB_BACKEND, init_db
from inspection.llm_client import is_configured
from routers import health, insight, observation, session

# ============================================================
# FastAPI アプリ基本設定 (Swagger 説明つき)
# ============================================================

app = FastAPI(
    title="店舗視察アシスタント バックエンド API",
    description="""
小売店舗の**視察メモ分類・分析**バックエンド API です。

- フロントは録音した音声、またはテキストのメモをこの API に送ります。
- このバックエンドは
  - 音声の文字起こし
  - 視察カテゴリ(価格情報/売り場情報/客層・混雑度/商品構成/店舗環境)への分類
  - カテゴリ別の所見と音声ログの蓄積
  - AI インサイト生成 / データへの質問応答
  - Markdown / PDF レポート出力
  を行います。
""",
    version="1.0.0",
)

# CORS: 開発中は * を許可 (本番ではドメインを絞る)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(observation.router)
app.include_router(session.router)
app.include_router(insight.router)

# テーブルがなければ作る
if USE_DB:
    init_db()

logger.info(f"DB backend: {DB_BACKEND} (USE_DB={USE_DB})")
logger.info(f"OpenAI API Key configured: {is_configured()}")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app_fastapi:app", host="0.0.0.0", port=3001, reload=False)
