"""
Declarative option -> SearchItems parameter table.

Each row names where a value lives on SearchOptions, the PA-API field it maps
to, the predicate deciding whether it is sent at all, and an optional
transform. Omitted fields never appear in the request, not even as empty
values.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Tuple

from .options import ALL_MERCHANTS, ALL_SEARCH_INDEXES, ANY_CONDITION, DEFAULT_SORT

#: Bounds PA-API accepts for ItemCount and ItemPage.
PAGE_BOUNDS: Tuple[int, int] = (1, 10)


def _identity(value: Any) -> Any:
    return value


def present(value: Any) -> bool:
    """Truthy check. Numeric 0 counts as unset, so a zero filter cannot be sent."""
    return bool(value)


def not_sentinel(sentinel: str) -> Callable[[Any], bool]:
    def predicate(value: Any) -> bool:
        return bool(value) and value != sentinel
    return predicate


def within(low: int, high: int) -> Callable[[Any], bool]:
    # Out-of-range values are dropped rather than clamped or rejected.
    # TODO: decide with product owners whether ItemCount/ItemPage outside 1..10 should raise.
    def predicate(value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high
    return predicate


def split_languages(value: str) -> List[str]:
    return [lang.strip() for lang in value.split(",")]


@dataclass(frozen=True)
class MappingRule:
    source: str  # dotted attribute path on SearchOptions
    target: str  # PA-API request field
    include: Callable[[Any], bool] = present
    transform: Callable[[Any], Any] = _identity

    def read(self, options: Any) -> Any:
        value = options
        for attr in self.source.split("."):
            value = getattr(value, attr, None)
            if value is None:
                return None
        return value


SEARCH_CRITERIA_FIELDS = ("Keywords", "Title", "Actor", "Artist", "Author", "Brand", "BrowseNodeId")

RULES: Tuple[MappingRule, ...] = (
    MappingRule("search_index", "SearchIndex", not_sentinel(ALL_SEARCH_INDEXES)),
    # Search criteria are alternatives; any combination is passed through.
    MappingRule("search_criteria.keywords", "Keywords"),
    MappingRule("search_criteria.title", "Title"),
    MappingRule("search_criteria.actor", "Actor"),
    MappingRule("search_criteria.artist", "Artist"),
    MappingRule("search_criteria.author", "Author"),
    MappingRule("search_criteria.brand", "Brand"),
    MappingRule("search_criteria.browse_node_id", "BrowseNodeId"),
    # Filters
    MappingRule("filters.min_price", "MinPrice"),
    MappingRule("filters.max_price", "MaxPrice"),
    MappingRule("filters.min_reviews_rating", "MinReviewsRating"),
    MappingRule("filters.min_saving_percent", "MinSavingPercent"),
    MappingRule("filters.condition", "Condition", not_sentinel(ANY_CONDITION)),
    MappingRule("filters.availability", "Availability"),
    MappingRule("filters.merchant", "Merchant", not_sentinel(ALL_MERCHANTS)),
    MappingRule("filters.delivery_flags", "DeliveryFlags", transform=list),
    # Pagination and ordering
    MappingRule("item_count", "ItemCount", within(*PAGE_BOUNDS)),
    MappingRule("item_page", "ItemPage", within(*PAGE_BOUNDS)),
    MappingRule("sort_by", "SortBy", not_sentinel(DEFAULT_SORT)),
    MappingRule("resources", "Resources", transform=list),
    # Additional options; pacing fields are consumed by the engine, not sent.
    MappingRule("additional_options.offer_count", "OfferCount"),
    MappingRule("additional_options.currency_of_preference", "CurrencyOfPreference"),
    MappingRule("additional_options.languages_of_preference", "LanguagesOfPreference",
                transform=split_languages),
)
