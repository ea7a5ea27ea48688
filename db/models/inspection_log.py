from sqlalchemy import (
    Column,
    BigInteger,
    Integer,
    String,
    Text,
    DateTime,
    JSON,
)
from sqlalchemy.sql import func

from db.base import Base


class InspectionLog(Base):
    """分類パイプライン 1 回分の記録。"""

    __tablename__ = "inspection_logs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    session_id = Column(String(100), nullable=False, index=True)
    store_name = Column(String(200), nullable=True)
    source = Column(String(20), nullable=False)          # text / text+model / audio
    path = Column(String(20), nullable=False)            # structured / fallback
    transcript = Column(Text, nullable=False)
    record_count = Column(Integer, nullable=False, default=0)
    records_json = Column(JSON, nullable=False)          # [{"category","text","confidence"}]
    created_at = Column(DateTime, nullable=False, server_default=func.now())
