import io
import unittest
from datetime import datetime

from openpyxl import load_workbook

from core.report_pdf import render_inspection_report_pdf
from core.report_xlsx import render_inspection_report_xlsx
from inspection.classification_agent import build_classification_prompt
from inspection.insight_agent import build_insight_prompt, build_question_prompt, format_findings
from inspection.report import build_report_filename, build_report_markdown
from inspection.session_state import InspectionSession
from inspection.taxonomy import DEFAULT_TAXONOMY

NOW = datetime(2026, 10, 19, 10, 30, 0)


class ReportTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = InspectionSession(clock=lambda: NOW)
        self.session.submit_observation("値段が安い")
        self.session.submit_observation("特に気づいた点はない")

    def test_markdown_report(self) -> None:
        self.session.record_insights("価格競争力が高い")
        self.session.record_answer("強みは?", "価格です")
        report = build_report_markdown(self.session, NOW)

        self.assertTrue(report.startswith("# 店舗視察レポート"))
        self.assertIn("**店舗名:** 未設定", report)
        self.assertIn("**視察日時:** 2026/10/19 10:30:00", report)
        self.assertIn("## 価格情報", report)
        self.assertIn("- **10:30:00:** 値段が安い (信頼度: 80%)", report)
        self.assertNotIn("## 売り場情報", report)
        self.assertIn("## AI分析結果", report)
        self.assertIn("**Q:** 強みは?", report)
        self.assertIn("**A:** 価格です", report)
        self.assertTrue(report.endswith("値段が安い\n\n特に気づいた点はない"))

    def test_markdown_report_without_ai_sections(self) -> None:
        report = build_report_markdown(self.session, NOW)
        self.assertNotIn("## AI分析結果", report)
        self.assertNotIn("## Q&A履歴", report)

    def test_filename(self) -> None:
        self.session.store_name = "駅前店"
        name = build_report_filename(self.session, NOW, "md")
        self.assertTrue(name.startswith("店舗視察_駅前店_"))
        self.assertTrue(name.endswith(".md"))

    def test_pdf_report(self) -> None:
        pdf = render_inspection_report_pdf(self.session, NOW)
        self.assertTrue(pdf.startswith(b"%PDF"))

    def test_xlsx_report(self) -> None:
        self.session.record_answer("強みは?", "価格です")
        wb = load_workbook(io.BytesIO(render_inspection_report_xlsx(self.session, NOW)))

        self.assertEqual(wb.sheetnames, ["サマリー", "価格情報", "AI分析", "音声ログ"])
        summary = [list(r) for r in wb["サマリー"].iter_rows(values_only=True)]
        self.assertEqual(summary[2][:2], ["店舗名", "未設定"])
        self.assertEqual(summary[6][:2], ["価格情報", 1])
        self.assertEqual(len(summary), 6 + len(DEFAULT_TAXONOMY))

        rows = list(wb["価格情報"].iter_rows(values_only=True))
        self.assertEqual(rows[2], ("時刻", "内容", "信頼度"))
        self.assertEqual(rows[3], ("10:30:00", "値段が安い", "80%"))

        log = [r[0] for r in wb["音声ログ"].iter_rows(values_only=True)]
        self.assertEqual(log[-2:], ["値段が安い", "特に気づいた点はない"])

    def test_xlsx_report_without_ai_sheet(self) -> None:
        wb = load_workbook(io.BytesIO(render_inspection_report_xlsx(self.session, NOW)))
        self.assertNotIn("AI分析", wb.sheetnames)

    def test_non_finite_model_confidence_still_renders(self) -> None:
        session = InspectionSession(clock=lambda: NOW)
        session.submit_observation(
            '{"transcript": "t", "categorized_items": [{"category": "価格情報", "text": "安い", "confidence": NaN}]}'
        )
        self.assertEqual(session.findings.records("価格情報")[0].confidence, 1.0)
        self.assertIn("安い (信頼度: 100%)", build_report_markdown(session, NOW))


class PromptTests(unittest.TestCase):
    def test_classification_prompt_lists_categories(self) -> None:
        prompt = build_classification_prompt(DEFAULT_TAXONOMY)
        for category in DEFAULT_TAXONOMY:
            self.assertIn(f"- {category.name}: {category.description}", prompt)
        self.assertIn('"categorized_items"', prompt)

    def test_insight_and_question_prompts(self) -> None:
        snapshot = {
            "store_name": "駅前店",
            "categories": [{"name": "価格情報", "items": ["値段が安い", "特売あり"]}],
            "transcript": "値段が安い",
        }
        self.assertEqual(format_findings(snapshot), "### 価格情報\n値段が安い\n特売あり")
        self.assertIn("店舗名: 駅前店", build_insight_prompt(snapshot))
        self.assertIn("競合優位性分析", build_insight_prompt(snapshot))
        self.assertIn("質問: 強みは?", build_question_prompt(snapshot, "強みは?"))


if __name__ == "__main__":
    unittest.main()
