"""
Drafts — duplicate-draft prevention by buyer phone.
"""

from sellerdesk.drafts._matcher import DraftMatcher
from sellerdesk.drafts._debounce import Debouncer


__all__ = (
    "DraftMatcher",
    "Debouncer",
)
