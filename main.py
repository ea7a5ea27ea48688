# -*- coding: utf-8 -*-
"""
main.py

店舗視察アシスタントのコンソールデモです。

🎯 役割
--------------------------------------
- 視察メモをテキストで入力し、inspection エンジンの分類結果を確認する
- モデルは使わず、キーワード分類(フォールバック経路)だけで動く
- 入力が JSON (モデル応答の形) なら構造化経路で取り込む

コマンド
--------------------------------------
- report : Markdown レポートを表示
- reset  : データクリア
- exit   : 終了
"""

from inspection import InspectionSession, run_pipeline_once
from inspection.report import build_report_markdown


def run_text_mode():
    print("\n[テキストモード] 視察メモを入力してください (report / reset / exit)")
    store_name = input("店舗名 > ").strip()
    session = InspectionSession(store_name=store_name)

    while True:
        try:
            text = input("\nメモ > ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n終了します。")
            break

        if text.lower() in ("exit", "quit"):
            print("終了します。")
            break
        if text.lower() == "report":
            print(build_report_markdown(session))
            continue
        if text.lower() == "reset":
            session.reset()
            print("データをクリアしました。")
            continue

        result = run_pipeline_once(session, text)

        print("[経路]", result.path)
        print("[音声ログ]", result.transcript)
        if not result.new_records:
            print("[分類] なし")
        for rec in result.new_records:
            print(f"[分類] {rec.category} ({rec.confidence:.2f}) {rec.text}")


if __name__ == "__main__":
    run_text_mode()
