"""Fixed enumerations for companies: towns and industries.

Industries follow the county's "一主两新三支撑" policy order, which is
also the display order wherever industries are listed.

Usage:
    from headcount.domain.catalog import sort_by_industry_policy

    ordered = sort_by_industry_policy(["其他", "电子信息", "纺织服装"])
    # -> ["纺织服装", "电子信息", "其他"]
"""

from typing import Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")

OTHER = "其他"

INDUSTRY_POLICY_ORDER: List[str] = [
    "纺织服装",        # 一主
    "生物医药化工",    # 两新
    "电子信息",        # 两新
    "装备制造",        # 三支撑
    "新能源新材料",    # 三支撑
    "农副产品深加工",  # 三支撑
    "商贸物流",
    OTHER,
]

# Spelling variants seen in imported data
INDUSTRY_ALIASES = {
    "生物医药（化工）": "生物医药化工",
    "装备制造产业": "装备制造",
}

TOWNS: List[str] = [
    "多祥",
    "侯口",
    "小板",
    "岳口",
    "九真",
    "黄潭",
    OTHER,
]


def normalize_industry(name: Optional[str]) -> str:
    """Map an industry label onto its canonical name; blanks become "其他"."""
    if not name:
        return OTHER
    name = name.strip()
    return INDUSTRY_ALIASES.get(name, name)


def industry_rank(name: str) -> int:
    """Position in the policy order; unknown industries sort last."""
    canonical = normalize_industry(name)
    try:
        return INDUSTRY_POLICY_ORDER.index(canonical)
    except ValueError:
        return len(INDUSTRY_POLICY_ORDER)


def sort_by_industry_policy(
    items: Iterable[T], key: Optional[Callable[[T], str]] = None
) -> List[T]:
    """Stable sort of *items* by the policy order of ``key(item)``."""
    get = key or str
    return sorted(items, key=lambda item: industry_rank(get(item)))
