import re
from collections.abc import Sequence
from dataclasses import dataclass

from rapidfuzz import fuzz, process, utils

from quick_entry.domain.text import contains_keyword, has_any_keyword
from quick_entry.models import Category, TransactionType

TRANSFER_CATEGORY = "Transfer"
OTHER_EXPENSE_CATEGORY = "Other"
OTHER_INCOME_CATEGORY = "Other Income"
FUZZY_CATEGORY_THRESHOLD = 85.0


@dataclass(frozen=True)
class KeywordRule:
    name: str
    keywords: tuple[str, ...]
    pattern: re.Pattern[str]

    def matches(self, text: str) -> bool:
        return has_any_keyword(text, self.keywords)

    def pick(self, candidates: Sequence[str]) -> str | None:
        return next((c for c in candidates if self.pattern.search(c)), None)


INCOME_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        "salary",
        ("薪水", "薪資", "薪资", "月薪", "年終", "年终", "salary", "paycheck", "payroll", "wage", "wages"),
        re.compile(r"薪|工作|收入|salary|wage|payroll|pay|work", re.IGNORECASE),
    ),
    KeywordRule(
        "bonus",
        ("獎金", "奖金", "紅包", "红包", "分紅", "分红", "bonus", "red envelope", "commission"),
        re.compile(r"獎|奖|紅包|红包|bonus|gift|commission", re.IGNORECASE),
    ),
    KeywordRule(
        "investment",
        ("股利", "利息", "投資", "投资", "基金", "股票", "配息", "dividend", "interest", "investment", "stock", "fund"),
        re.compile(r"投資|投资|利息|股利|基金|股票|配息|invest|interest|dividend", re.IGNORECASE),
    ),
)

EXPENSE_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        "food",
        (
            "早餐", "午餐", "晚餐", "餐", "便當", "便当", "飲料", "饮料", "咖啡", "宵夜", "吃飯", "吃饭",
            "breakfast", "lunch", "dinner", "brunch", "meal", "coffee", "snack", "drink", "drinks", "restaurant",
        ),
        re.compile(r"餐|飲|饮|食|food|meal|eat|dining|restaurant", re.IGNORECASE),
    ),
    KeywordRule(
        "transport",
        (
            "捷運", "捷运", "公車", "公交", "計程車", "出租车", "高鐵", "高铁", "火車", "火车", "停車", "停车", "油錢", "加油",
            "taxi", "uber", "bus", "metro", "mrt", "subway", "train", "parking", "gas", "fuel",
        ),
        re.compile(r"交|車|车|運|运|transport|traffic|commute", re.IGNORECASE),
    ),
    KeywordRule(
        "daily",
        (
            "超商", "全聯", "家樂福", "日用品", "文具", "用品", "購物", "购物", "生活",
            "supermarket", "grocery", "groceries", "convenience store", "toiletries", "stationery", "shopping",
        ),
        re.compile(r"日常|生活|購物|购物|用品|雜支|杂支|daily|shop|grocer|household", re.IGNORECASE),
    ),
    KeywordRule(
        "housing",
        (
            "房租", "租金", "水費", "水费", "電費", "电费", "瓦斯", "家電", "家电", "家具", "修繕",
            "rent", "water bill", "electricity", "utilities", "furniture", "repair",
        ),
        re.compile(r"居家|住|房|租|家|home|house|housing|rent|utilit", re.IGNORECASE),
    ),
    KeywordRule(
        "leisure",
        (
            "電影", "电影", "遊戲", "游戏", "ktv", "唱歌", "聚餐", "旅遊", "旅游", "娛樂", "娱乐", "演唱會", "串流",
            "movie", "cinema", "game", "games", "karaoke", "travel", "concert", "streaming", "netflix",
        ),
        re.compile(r"娛|娱|樂|乐|遊|游|電影|休閒|play|fun|entertain|leisure|hobby", re.IGNORECASE),
    ),
    KeywordRule(
        "health",
        (
            "看醫生", "看医生", "診所", "诊所", "醫院", "医院", "藥", "药", "掛號", "健檢", "牙醫", "醫療",
            "doctor", "clinic", "hospital", "medicine", "pharmacy", "dentist", "checkup",
        ),
        re.compile(r"醫|医|療|疗|健康|health|medical|clinic", re.IGNORECASE),
    ),
)

RULES_BY_TYPE: dict[str, tuple[KeywordRule, ...]] = {
    "income": INCOME_RULES,
    "expense": EXPENSE_RULES,
}


def allowed_categories(categories: Sequence[Category], tx_type: TransactionType) -> list[str]:
    return [c.name for c in categories if c.type is None or c.type == tx_type]


def direct_match(text: str, candidates: Sequence[str]) -> str | None:
    return next((c for c in candidates if c and contains_keyword(text or "", c.lower())), None)


def keyword_match(text: str, candidates: Sequence[str], tx_type: TransactionType) -> str | None:
    """First rule for ``tx_type`` whose keywords hit ``text`` and whose pattern picks a candidate."""
    for rule in RULES_BY_TYPE.get(tx_type, ()):
        if not rule.matches(text):
            continue
        picked = rule.pick(candidates)
        if picked:
            return picked
    return None


def strong_rule(text: str, tx_type: TransactionType) -> KeywordRule | None:
    """The keyword rule for ``tx_type`` when exactly one rule fires on ``text``."""
    hits = [rule for rule in RULES_BY_TYPE.get(tx_type, ()) if rule.matches(text)]
    return hits[0] if len(hits) == 1 else None


def infer_category(
    text: str,
    candidates: Sequence[str],
    tx_type: TransactionType,
    transfer_category: str = TRANSFER_CATEGORY,
) -> str | None:
    if tx_type == "transfer":
        return transfer_category

    # 1. Direct mention of a category name
    direct = direct_match(text, candidates)
    if direct:
        return direct

    # 2. Keyword groups
    picked = keyword_match(text, candidates, tx_type)
    if picked:
        return picked

    # 3. Income falls back to the first income category
    if tx_type == "income" and candidates:
        return candidates[0]
    return None


def default_category(tx_type: TransactionType, transfer_category: str = TRANSFER_CATEGORY) -> str:
    if tx_type == "transfer":
        return transfer_category
    return OTHER_INCOME_CATEGORY if tx_type == "income" else OTHER_EXPENSE_CATEGORY


def coerce_category(
    tx_type: TransactionType,
    candidate: str | None,
    categories: Sequence[Category],
    transfer_category: str = TRANSFER_CATEGORY,
) -> str:
    """Force ``candidate`` onto a category that is valid for ``tx_type``."""
    if tx_type == "transfer":
        return transfer_category
    allowed = allowed_categories(categories, tx_type)
    if not allowed:
        return default_category(tx_type)
    if candidate:
        if candidate in allowed:
            return candidate
        contained = next((name for name in allowed if name in candidate or candidate in name), None)
        if contained:
            return contained
        result = process.extractOne(candidate, allowed, scorer=fuzz.WRatio, processor=utils.default_process)
        if result:
            match_name, score, _ = result
            if score >= FUZZY_CATEGORY_THRESHOLD:
                return match_name
    return allowed[0]
