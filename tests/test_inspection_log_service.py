import unittest
from datetime import datetime

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from db.base import Base
from db.models.inspection_log import InspectionLog
from inspection.session_state import InspectionSession
from services.inspection_log_service import list_inspection_logs, save_inspection_log

NOW = datetime(2026, 10, 19, 10, 30, 0)


class InspectionLogServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite://", future=True)
        Base.metadata.create_all(bind=self.engine)
        self.db = sessionmaker(bind=self.engine)()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def test_save_and_list(self) -> None:
        session = InspectionSession(clock=lambda: NOW)
        result = session.submit_observation("値段が安い")

        row = save_inspection_log(self.db, "s1", result, "text", store_name="駅前店")
        self.assertIsInstance(row, InspectionLog)
        self.assertIsNotNone(row.id)
        self.assertEqual(row.path, "fallback")
        self.assertEqual(row.record_count, 1)
        self.assertEqual(row.records_json[0]["category"], "価格情報")

        save_inspection_log(self.db, "s1", session.submit_observation(""), "text")
        save_inspection_log(self.db, "s2", session.submit_observation("値段"), "text")

        logs = list_inspection_logs(self.db, "s1")
        self.assertEqual([log.record_count for log in logs], [1, 0])


if __name__ == "__main__":
    unittest.main()
