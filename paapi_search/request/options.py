from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Sentinel values meaning "no filter selected"; these are never sent.
ALL_SEARCH_INDEXES = "All"
ANY_CONDITION = "Any"
ALL_MERCHANTS = "All"
DEFAULT_SORT = "Relevance"

CONDITIONS = ["Any", "Collectible", "New", "Refurbished", "Used"]
AVAILABILITIES = ["Available", "IncludeOutOfStock"]
MERCHANTS = ["All", "Amazon"]
DELIVERY_FLAGS = ["AmazonGlobal", "FreeShipping", "FulfilledByAmazon", "Prime"]
SORT_ORDERS = [
    "AvgCustomerReviews",
    "Relevance",
    "Featured",
    "NewestArrivals",
    "Price:HighToLow",
    "Price:LowToHigh",
]

#: Resources requested when the user does not pick any.
DEFAULT_RESOURCES = ["ItemInfo.Title", "Offers.Listings.Price", "Images.Primary.Medium"]


class _Options(BaseModel):
    # Hosts send camelCase (searchIndex, minPrice); Python callers use snake_case.
    # Numeric JSON values (browseNodeId: 283155) are accepted for string fields.
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid", coerce_numbers_to_str=True
    )


class SearchCriteria(_Options):
    """Alternative ways to locate items; at least one must be non-empty."""

    keywords: str = ""
    title: str = ""
    actor: str = ""
    artist: str = ""
    author: str = ""
    brand: str = ""
    browse_node_id: str = ""


class SearchFilters(_Options):
    # Prices are in the lowest currency denomination (e.g. cents); 0 means unset.
    min_price: int = 0
    max_price: int = 0
    min_reviews_rating: int = 0
    min_saving_percent: int = 0
    condition: str = ANY_CONDITION
    availability: Optional[str] = None
    merchant: str = ALL_MERCHANTS
    delivery_flags: List[str] = Field(default_factory=list)


class AdditionalOptions(_Options):
    offer_count: Optional[int] = None
    currency_of_preference: str = ""
    # Comma-separated, e.g. "en_US, fr_FR"
    languages_of_preference: str = ""
    # Pacing, in milliseconds; only applies from the second item of a batch on.
    request_delay: int = 0
    jitter_delay: bool = False
    max_jitter: int = Field(default=500, ge=0)


class SearchOptions(_Options):
    """
    Everything a caller can say about one SearchItems request.

    item_count and item_page are deliberately not range-checked here; values
    outside 1..10 are dropped by the request builder.
    """

    search_index: str = ALL_SEARCH_INDEXES
    search_criteria: SearchCriteria = Field(default_factory=SearchCriteria)
    filters: SearchFilters = Field(default_factory=SearchFilters)
    item_count: Optional[int] = None
    item_page: Optional[int] = None
    sort_by: str = DEFAULT_SORT
    resources: List[str] = Field(default_factory=list)
    additional_options: AdditionalOptions = Field(default_factory=AdditionalOptions)
    # Overrides the partner tag stored with the credentials.
    partner_tag: str = ""
