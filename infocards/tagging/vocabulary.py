"""
Fixed Tag Vocabulary

Lookup tables used by the enrichment engine. They are built once at import
and are read-only: tuples for ordered data, MappingProxyType for maps.

Order matters everywhere here. Tags are added in table order and the final
list is truncated, so earlier entries win.
"""

import re
from types import MappingProxyType


# General-purpose tags used to pad short results, in this order
FIXED_TAGS: tuple[str, ...] = (
    "お金", "購入", "アカウント", "タスク", "サブスク", "連絡", "学校", "仕事",
    "重要", "至急", "解約", "支払い", "請求", "更新", "期日", "メンテ", "設定",
    "障害", "連携", "動画", "音楽", "写真", "学割", "領収書", "旅行", "地名",
    "日本",
)

# Known services: lower-case substring -> category tags
BRAND_TAGS = MappingProxyType({
    "youtube": ("サブスク", "動画", "Google"),
    "youtube premium": ("サブスク", "動画", "Google"),
    "netflix": ("サブスク", "動画"),
    "spotify": ("サブスク", "音楽"),
    "prime video": ("サブスク", "動画", "Amazon"),
    "apple music": ("サブスク", "音楽", "Apple"),
    "icloud": ("サブスク", "Apple"),
    "adobe": ("サブスク", "Adobe"),
    "microsoft": ("サブスク", "Microsoft"),
    "github": ("開発", "コード", "アカウント"),
    "google": ("Google",),
})

KEYWORD_PATTERNS: tuple[tuple[re.Pattern, tuple[str, ...]], ...] = (
    # billing / payment
    (re.compile(r"(請求|支払|支払い|入金|料金|振込|引き落とし|明細|領収書)", re.I), ("お金", "請求")),
    # purchase
    (re.compile(r"(購入|買|発注|注文|納品|見積|請求書|領収書)", re.I), ("購入",)),
    # cancellation
    (re.compile(r"(解約|退会|停止|キャンセル|解除)", re.I), ("解約",)),
    # subscription / renewal
    (re.compile(r"(更新|自動更新|サブスク|subscription)", re.I), ("サブスク", "更新")),
    # task / deadline
    (re.compile(r"(todo|やる|締切|期限|提出|課題|タスク)", re.I), ("タスク", "期日")),
    # account / auth
    (re.compile(r"(ログイン|account|アカウント|password|パスワード|2fa|otp|ユーザー)", re.I), ("アカウント", "認証")),
    # contact / support
    (re.compile(r"(問い合わせ|連絡|メール|電話|サポート|サポセン)", re.I), ("連絡",)),
    # video
    (re.compile(r"(動画|movie|video|vod)", re.I), ("動画",)),
    # audio
    (re.compile(r"(音楽|music|song|曲)", re.I), ("音楽",)),
)

GEO_PATTERNS: tuple[tuple[re.Pattern, tuple[str, ...]], ...] = (
    (re.compile(r"(東京|tokyo)", re.I), ("地名", "日本", "旅行", "関東", "首都圏")),
    (re.compile(r"(京都|kyoto)", re.I), ("地名", "日本", "旅行", "関西")),
    (re.compile(r"(大阪|osaka)", re.I), ("地名", "日本", "旅行", "関西")),
)

# One level only: synonyms of synonyms are not looked up
SYNONYMS = MappingProxyType({
    "解約": ("キャンセル", "退会", "停止"),
    "請求": ("支払い", "料金", "明細"),
    "サブスク": ("定額", "月額", "定期"),
    "動画": ("映像", "VOD", "配信"),
    "音楽": ("ミュージック", "楽曲", "ストリーミング"),
    "購入": ("注文", "ショッピング", "支出"),
    "アカウント": ("ログイン", "ユーザー", "認証"),
    "旅行": ("観光", "トラベル", "観光地"),
    "地名": ("ロケーション", "場所"),
    "重要": ("優先", "注目"),
    "期日": ("締切", "デッドライン"),
})

# Loose keyword detectors
DATE_PATTERN = re.compile(r"\d{1,2}/\d{1,2}|\d{4}[-/年]\d{1,2}", re.ASCII)
AMOUNT_PATTERN = re.compile(r"\d+円", re.ASCII)
YEAR_PATTERN = re.compile(r"\b(?:20\d{2}|19\d{2})\b", re.ASCII)
KATAKANA_PATTERN = re.compile(r"[ァ-ヶー]{2,10}")
ASCII_TOKEN_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9\-_.]{1,19}")

DATE_TAG = "日付"
AMOUNT_TAG = "金額"
YEAR_TAG = "年"

MAX_KATAKANA_TOKENS = 3
MAX_ASCII_TOKENS = 3
