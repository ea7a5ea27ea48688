import os
import tempfile

# テスト中は DB に書かず、JSONL ログは一時ディレクトリへ
os.environ.setdefault("USE_DB", "false")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="inspection-logs-"))
