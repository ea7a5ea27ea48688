# db/session.py
# -*- coding: utf-8 -*-
"""
SQLAlchemy のエンジン / セッション設定モジュール

- 既定: .env に MySQL 接続情報がそろっていれば MySQL を使う
- fallback: そろっていなければ SQLite ファイル(inspection_dev.db)を使う
- USE_DB 環境変数で「DB に記録するかどうか」を切り替える
    - エンジンは常に作るが、ルーター側で USE_DB を見て書き込みを飛ばす
"""

import os
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from db.base import Base

load_dotenv()

# ---------------------------------------------------------
# 1) 環境変数
# ---------------------------------------------------------

DB_HOST = os.getenv("DB_HOST")
DB_PORT = os.getenv("DB_PORT", "3306")
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME")

DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

USE_DB = os.getenv("USE_DB", "true").lower() == "true"

# ---------------------------------------------------------
# 2) MySQL or SQLite
# ---------------------------------------------------------

if DB_HOST and DB_USER and DB_PASSWORD and DB_NAME:
    DB_BACKEND = "mysql"
    DATABASE_URL = (
        f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}?charset=utf8mb4"
    )
else:
    DB_BACKEND = "sqlite"
    SQLITE_PATH = os.path.abspath(os.getenv("SQLITE_PATH", "./inspection_dev.db"))
    DATABASE_URL = f"sqlite:///{SQLITE_PATH}"

# ---------------------------------------------------------
# 3) Engine / SessionLocal
# ---------------------------------------------------------

engine_kwargs = {
    "echo": DB_ECHO,
    "future": True,
}

# SQLite は FastAPI のスレッドプールから触るので check_same_thread を外す
if DB_BACKEND == "sqlite":
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs["pool_recycle"] = 3600
    engine_kwargs["pool_pre_ping"] = True

engine = create_engine(DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=Session,
)


def init_db() -> None:
    # モデルを登録してからテーブル作成
    import db.models.inspection_log  # noqa: F401

    Base.metadata.create_all(bind=engine)


# ---------------------------------------------------------
# 4) FastAPI Depends 用
# ---------------------------------------------------------

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI の Depends で使う DB セッション。

    - USE_DB が False でもセッション自体は返す
      (書き込むかどうかはルーター側で判断)
    """
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
