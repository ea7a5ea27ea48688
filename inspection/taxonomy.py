# -*- coding: utf-8 -*-
"""
店舗視察カテゴリ(タクソノミー)の定義モジュール。

役割
----
- Category: 名前 / 説明 / キーワード を持つ不変の値。
- Taxonomy: 登録順を保ったカテゴリの集合。プロセス起動時に一度だけ作り、
  パイプラインへ引数として渡す。パイプライン側で追加・削除はしない。
- DEFAULT_TAXONOMY: 視察アプリの標準 5 カテゴリ。

注意
----
- description はプロンプト生成とレポート表示にだけ使い、分類ロジックでは使わない。
- keywords はキーワード分類(フォールバック経路)専用。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple


@dataclass(frozen=True)
class Category:
    name: str
    description: str
    keywords: Tuple[str, ...] = ()


class Taxonomy:
    """登録順を保持する不変のカテゴリ集合。"""

    def __init__(self, categories: Iterable[Category]):
        ordered = tuple(categories)
        by_name = {}
        for cat in ordered:
            if cat.name in by_name:
                raise ValueError(f"カテゴリ名が重複しています: {cat.name}")
            by_name[cat.name] = cat
        self._categories = ordered
        self._by_name = by_name

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    def names(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self._categories)

    def get(self, name: str) -> Optional[Category]:
        return self._by_name.get(name)

    def has(self, name: str) -> bool:
        return name in self._by_name


# ------------------------------------------------------------
# 標準カテゴリのキーワード
# ------------------------------------------------------------

PRICE_KEYWORDS = (
    "価格",
    "値段",
    "円",
    "安い",
    "高い",
    "特売",
    "セール",
    "割引",
    "値引",
    "チラシ",
    "ポイント",
)

FLOOR_KEYWORDS = (
    "売り場",
    "売場",
    "レイアウト",
    "陳列",
    "棚",
    "通路",
    "エンド",
    "面積",
    "什器",
    "POP",
)

CUSTOMER_KEYWORDS = (
    "客層",
    "お客",
    "来店",
    "混雑",
    "混んで",
    "空いて",
    "行列",
    "レジ待ち",
    "年配",
    "若い",
    "家族連れ",
    "動線",
)

ASSORTMENT_KEYWORDS = (
    "品揃え",
    "品ぞろえ",
    "商品",
    "欠品",
    "品切れ",
    "PB",
    "プライベートブランド",
    "新商品",
    "アイテム",
    "SKU",
)

ENVIRONMENT_KEYWORDS = (
    "立地",
    "駅",
    "駐車場",
    "アクセス",
    "設備",
    "清潔",
    "きれい",
    "汚い",
    "照明",
    "トイレ",
    "入口",
)


DEFAULT_TAXONOMY = Taxonomy(
    [
        Category(
            name="価格情報",
            description="商品の価格、特売情報、価格比較に関する情報",
            keywords=PRICE_KEYWORDS,
        ),
        Category(
            name="売り場情報",
            description="売り場のレイアウト、面積、陳列方法に関する情報",
            keywords=FLOOR_KEYWORDS,
        ),
        Category(
            name="客層・混雑度",
            description="来店客の年齢層、混雑状況、客動線に関する情報",
            keywords=CUSTOMER_KEYWORDS,
        ),
        Category(
            name="商品構成",
            description="品揃え、欠品状況、プライベートブランドに関する情報",
            keywords=ASSORTMENT_KEYWORDS,
        ),
        Category(
            name="店舗環境",
            description="立地、アクセス、店舗設備、清潔感に関する情報",
            keywords=ENVIRONMENT_KEYWORDS,
        ),
    ]
)
