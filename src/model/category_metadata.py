"""Display metadata for earnings categories.

Short names are used as tooltip row labels and legend entries.
"""

from dataclasses import dataclass
from typing import Dict

from model.EarningsData import Category


@dataclass
class CategoryInfo:
    """Metadata for a single category."""
    short_name: str  # Tooltip/legend label
    description: str


CATEGORY_METADATA: Dict[Category, CategoryInfo] = {
    Category.SUBSCRIPTIONS: CategoryInfo("Subscriptions", "Recurring subscription payments"),
    Category.TIPS: CategoryInfo("Tips", "One-off tips"),
    Category.POSTS: CategoryInfo("Posts", "Paid post unlocks"),
    Category.MESSAGES: CategoryInfo("Messages", "Paid message unlocks"),
    Category.REFERRALS: CategoryInfo("Referrals", "Referral program payouts"),
    Category.STREAMS: CategoryInfo("Streams", "Live stream earnings"),
}


def get_short_name(category: Category) -> str:
    """Get the short name for a category, or its value if not found."""
    info = CATEGORY_METADATA.get(category)
    return info.short_name if info else category.value


def format_money(amount: float) -> str:
    """Format a dollar amount the way the earnings UI shows it ($1,234.56)."""
    return f"${amount:,.2f}"
