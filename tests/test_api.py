import json
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app_fastapi import app
from inspection.errors import UpstreamModelError
from services.inspection_session_service import INSPECTION_SESSIONS

MODEL_RESPONSE = json.dumps(
    {
        "transcript": "安い店だ",
        "categorized_items": [{"category": "価格情報", "text": "安い", "confidence": 0.8}],
    },
    ensure_ascii=False,
)


class ApiTests(unittest.TestCase):
    def setUp(self) -> None:
        INSPECTION_SESSIONS.clear()
        self.client = TestClient(app)
        self.db_patch = patch("routers.observation.USE_DB", False)
        self.db_patch.start()

    def tearDown(self) -> None:
        self.db_patch.stop()
        INSPECTION_SESSIONS.clear()

    def _submit(self, text: str, **extra) -> dict:
        resp = self.client.post("/api/observations/text", json={"text": text, **extra})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def test_health(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "OK")

    def test_categories(self) -> None:
        names = [c["name"] for c in self.client.get("/api/categories").json()]
        self.assertEqual(names[0], "価格情報")
        self.assertEqual(len(names), 5)

    def test_text_observation_keyword_path(self) -> None:
        body = self._submit("値段が安い", store_name="駅前店")
        self.assertEqual(body["path"], "fallback")
        self.assertEqual(body["transcript"], "値段が安い")
        self.assertEqual(body["new_records"][0]["category"], "価格情報")
        self.assertEqual(body["new_records"][0]["confidence"], 0.8)

        session = self.client.get(f"/api/sessions/{body['session_id']}").json()
        self.assertEqual(session["store_name"], "駅前店")
        self.assertEqual(len(session["findings"]["価格情報"]), 1)
        self.assertEqual(len(session["transcript"]), 1)

    def test_same_session_accumulates(self) -> None:
        first = self._submit("値段が安い")
        second = self._submit("値段が安い", session_id=first["session_id"])
        self.assertEqual(first["session_id"], second["session_id"])
        session = self.client.get(f"/api/sessions/{first['session_id']}").json()
        self.assertEqual(len(session["findings"]["価格情報"]), 2)

    def test_text_observation_through_model(self) -> None:
        with patch("inspection.inspection_engine.request_classification", return_value=MODEL_RESPONSE):
            body = self._submit("安い店だ", use_model=True)
        self.assertEqual(body["path"], "structured")
        self.assertEqual(body["transcript"], "安い店だ")
        self.assertEqual(body["new_records"][0]["text"], "安い")

    def test_upstream_failure_returns_502_and_keeps_state(self) -> None:
        first = self._submit("値段が安い")
        with patch(
            "inspection.inspection_engine.request_classification",
            side_effect=UpstreamModelError("safety filter"),
        ):
            resp = self.client.post(
                "/api/observations/text",
                json={"text": "値段が安い", "session_id": first["session_id"], "use_model": True},
            )
        self.assertEqual(resp.status_code, 502)
        self.assertIn("safety filter", resp.json()["detail"])

        session = self.client.get(f"/api/sessions/{first['session_id']}").json()
        self.assertEqual(len(session["findings"]["価格情報"]), 1)
        self.assertEqual(len(session["transcript"]), 1)

    def test_db_failure_does_not_fail_the_request(self) -> None:
        db_error = OperationalError("INSERT INTO inspection_logs", {}, Exception("db down"))
        with patch("routers.observation.USE_DB", True), \
                patch("routers.observation.save_inspection_log", side_effect=db_error) as save:
            body = self._submit("値段が安い")
        save.assert_called_once()
        self.assertEqual(body["new_records"][0]["category"], "価格情報")

        session = self.client.get(f"/api/sessions/{body['session_id']}").json()
        self.assertEqual(len(session["findings"]["価格情報"]), 1)
        self.assertEqual(len(session["transcript"]), 1)

    def test_db_failure_on_audio_upload(self) -> None:
        db_error = OperationalError("INSERT INTO inspection_logs", {}, Exception("db down"))
        with patch("routers.observation.USE_DB", True), \
                patch("routers.observation.save_inspection_log", side_effect=db_error), \
                patch("inspection.inspection_engine.transcribe_bytes", return_value="安い店だ"), \
                patch("inspection.inspection_engine.request_classification", return_value=MODEL_RESPONSE):
            resp = self.client.post(
                "/api/transcribe",
                files={"audio": ("recording.webm", b"\x1a\x45\xdf\xa3", "audio/webm")},
                data={"session_id": "audio-session"},
            )
        self.assertEqual(resp.status_code, 200, resp.text)
        session = self.client.get("/api/sessions/audio-session").json()
        self.assertEqual(len(session["transcript"]), 1)

    def test_transcribe_audio(self) -> None:
        with patch("inspection.inspection_engine.transcribe_bytes", return_value="安い店だ"), \
                patch("inspection.inspection_engine.request_classification", return_value=MODEL_RESPONSE):
            resp = self.client.post(
                "/api/transcribe",
                files={"audio": ("recording.webm", b"\x1a\x45\xdf\xa3", "audio/webm")},
                data={"session_id": "audio-session"},
            )
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["session_id"], "audio-session")
        self.assertEqual(body["path"], "structured")

    def test_transcribe_requires_audio(self) -> None:
        resp = self.client.post("/api/transcribe", data={"session_id": "x"})
        self.assertEqual(resp.status_code, 400)

    def test_event_log(self) -> None:
        body = self._submit("値段が安い")
        events = self.client.get(f"/api/sessions/{body['session_id']}/events").json()
        types = [e["type"] for e in events]
        self.assertEqual(types, ["session_start", "observation"])
        self.assertEqual(events[1]["new_records"][0]["category"], "価格情報")

    def test_reset(self) -> None:
        body = self._submit("値段が安い")
        resp = self.client.post(f"/api/sessions/{body['session_id']}/reset")
        self.assertEqual(resp.status_code, 200)
        session = self.client.get(f"/api/sessions/{body['session_id']}").json()
        self.assertEqual(session["findings"]["価格情報"], [])
        self.assertEqual(session["transcript"], [])

    def test_unknown_session(self) -> None:
        self.assertEqual(self.client.get("/api/sessions/nope").status_code, 404)
        self.assertEqual(self.client.post("/api/sessions/nope/reset").status_code, 404)
        self.assertEqual(self.client.delete("/api/sessions/nope").status_code, 404)

    def test_store_name_and_report(self) -> None:
        body = self._submit("値段が安い")
        sid = body["session_id"]
        self.client.put(f"/api/sessions/{sid}/store-name", json={"store_name": "駅前店"})

        resp = self.client.get(f"/api/sessions/{sid}/report.md")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("**店舗名:** 駅前店", resp.text)
        self.assertIn("値段が安い (信頼度: 80%)", resp.text)

        pdf = self.client.get(f"/api/sessions/{sid}/report.pdf")
        self.assertEqual(pdf.status_code, 200)
        self.assertTrue(pdf.content.startswith(b"%PDF"))

        xlsx = self.client.get(f"/api/sessions/{sid}/report.xlsx")
        self.assertEqual(xlsx.status_code, 200)
        self.assertTrue(xlsx.content.startswith(b"PK"))
        self.assertIn(".xlsx", xlsx.headers["content-disposition"])

    def test_insights_require_findings(self) -> None:
        body = self._submit("特に気づいた点はない")
        resp = self.client.post("/api/generate-insights", json={"session_id": body["session_id"]})
        self.assertEqual(resp.status_code, 400)

    def test_generate_insights(self) -> None:
        body = self._submit("値段が安い")
        with patch("inspection.insight_agent.call_chat", return_value="価格が強み") as call_chat:
            resp = self.client.post("/api/generate-insights", json={"session_id": body["session_id"]})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["insights"], "価格が強み")
        prompt = call_chat.call_args.args[0][1]["content"]
        self.assertIn("### 価格情報\n値段が安い", prompt)

    def test_ask_question(self) -> None:
        body = self._submit("値段が安い")
        sid = body["session_id"]
        with patch("inspection.insight_agent.call_chat", return_value="価格です"):
            resp = self.client.post("/api/ask-question", json={"session_id": sid, "question": "強みは?"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["answer"], "価格です")

        session = self.client.get(f"/api/sessions/{sid}").json()
        self.assertEqual(session["qa_pairs"][0]["question"], "強みは?")

    def test_ask_question_requires_text(self) -> None:
        body = self._submit("値段が安い")
        resp = self.client.post("/api/ask-question", json={"session_id": body["session_id"], "question": "  "})
        self.assertEqual(resp.status_code, 400)


if __name__ == "__main__":
    unittest.main()
