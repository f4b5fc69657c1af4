"""Request builder: option mapping, omission rules and partner tag resolution."""

import pytest

from paapi_search.config import PaapiCredentials
from paapi_search.errors import ConfigurationError, ValidationError
from paapi_search.request.builder import (
    build_common_parameters,
    build_request_parameters,
    resolve_partner_tag,
)
from paapi_search.request.mapping import RULES, SEARCH_CRITERIA_FIELDS
from paapi_search.request.options import SearchOptions

CRITERIA = {
    "keywords": "Keywords",
    "title": "Title",
    "actor": "Actor",
    "artist": "Artist",
    "author": "Author",
    "brand": "Brand",
    "browse_node_id": "BrowseNodeId",
}


def _options(**kwargs) -> SearchOptions:
    kwargs.setdefault("search_criteria", {"keywords": "laptop"})
    return SearchOptions.model_validate(kwargs)


class TestSearchCriteria:
    def test_no_criteria_raises(self):
        with pytest.raises(ValidationError, match="At least one search criteria"):
            build_request_parameters(SearchOptions())

    def test_empty_strings_count_as_missing(self):
        options = SearchOptions.model_validate({"search_criteria": {k: "" for k in CRITERIA}})
        with pytest.raises(ValidationError):
            build_request_parameters(options)

    @pytest.mark.parametrize("source,target", sorted(CRITERIA.items()))
    def test_single_criterion_is_the_only_one_mapped(self, source, target):
        params = build_request_parameters(_options(search_criteria={source: "value"}))

        mapped = [f for f in SEARCH_CRITERIA_FIELDS if f in params]
        assert mapped == [target]
        assert params[target] == "value"

    def test_criteria_combine(self):
        params = build_request_parameters(
            _options(search_criteria={"author": "Tolkien", "title": "Hobbit"})
        )
        assert params["Author"] == "Tolkien"
        assert params["Title"] == "Hobbit"
        assert "Keywords" not in params

    def test_numeric_browse_node_id(self):
        options = SearchOptions.model_validate({"searchCriteria": {"browseNodeId": 283155}})
        assert build_request_parameters(options) == {"BrowseNodeId": "283155"}

    def test_camel_case_aliases(self):
        options = SearchOptions.model_validate(
            {"searchIndex": "Books", "searchCriteria": {"browseNodeId": "283155"}}
        )
        params = build_request_parameters(options)
        assert params == {"SearchIndex": "Books", "BrowseNodeId": "283155"}


class TestOmission:
    def test_end_to_end_minimal(self):
        params = build_request_parameters(_options(item_count=5, sort_by="Relevance"))
        assert params == {"Keywords": "laptop", "ItemCount": 5}

    def test_sentinels_omitted(self):
        params = build_request_parameters(
            _options(search_index="All", filters={"condition": "Any", "merchant": "All"})
        )
        assert params == {"Keywords": "laptop"}

    def test_non_sentinels_sent(self):
        params = build_request_parameters(
            _options(
                search_index="Electronics",
                sort_by="Price:LowToHigh",
                filters={"condition": "New", "merchant": "Amazon", "availability": "Available"},
            )
        )
        assert params["SearchIndex"] == "Electronics"
        assert params["SortBy"] == "Price:LowToHigh"
        assert params["Condition"] == "New"
        assert params["Merchant"] == "Amazon"
        assert params["Availability"] == "Available"

    def test_zero_price_treated_as_unset(self):
        params = build_request_parameters(_options(filters={"min_price": 0, "max_price": 5000}))
        assert "MinPrice" not in params
        assert params["MaxPrice"] == 5000

    def test_rating_and_saving(self):
        params = build_request_parameters(
            _options(filters={"min_reviews_rating": 4, "min_saving_percent": 0})
        )
        assert params["MinReviewsRating"] == 4
        assert "MinSavingPercent" not in params

    @pytest.mark.parametrize("value", [0, -1, 11, 15])
    def test_item_count_out_of_range_dropped(self, value):
        params = build_request_parameters(_options(item_count=value, item_page=value))
        assert "ItemCount" not in params
        assert "ItemPage" not in params

    @pytest.mark.parametrize("value", [1, 10])
    def test_item_count_bounds_inclusive(self, value):
        params = build_request_parameters(_options(item_count=value, item_page=value))
        assert params["ItemCount"] == value
        assert params["ItemPage"] == value

    def test_delivery_flags_and_resources(self):
        params = build_request_parameters(
            _options(filters={"delivery_flags": ["Prime"]}, resources=["ItemInfo.Title"])
        )
        assert params["DeliveryFlags"] == ["Prime"]
        assert params["Resources"] == ["ItemInfo.Title"]

        params = build_request_parameters(_options(filters={"delivery_flags": []}, resources=[]))
        assert "DeliveryFlags" not in params
        assert "Resources" not in params

    def test_languages_split_and_trimmed(self):
        params = build_request_parameters(
            _options(additional_options={"languages_of_preference": "en_US, fr_FR"})
        )
        assert params["LanguagesOfPreference"] == ["en_US", "fr_FR"]

    def test_additional_options(self):
        params = build_request_parameters(
            _options(additional_options={"offer_count": 1, "currency_of_preference": "EUR"})
        )
        assert params["OfferCount"] == 1
        assert params["CurrencyOfPreference"] == "EUR"

    def test_pacing_fields_never_sent(self):
        params = build_request_parameters(
            _options(additional_options={"request_delay": 200, "jitter_delay": True, "max_jitter": 100})
        )
        assert params == {"Keywords": "laptop"}

    def test_rule_targets_are_unique(self):
        targets = [r.target for r in RULES]
        assert len(targets) == len(set(targets))


class TestPartnerTag:
    creds = PaapiCredentials(access_key="AK", secret_key="SK", partner_tag="X", marketplace="www.amazon.com")

    def test_default_used_when_override_empty(self):
        assert resolve_partner_tag("", self.creds) == "X"

    def test_override_wins(self):
        assert resolve_partner_tag("Y", self.creds) == "Y"

    def test_missing_everywhere(self):
        creds = PaapiCredentials(access_key="AK", secret_key="SK")
        with pytest.raises(ConfigurationError, match="PartnerTag is required"):
            resolve_partner_tag("", creds)

    def test_common_parameters(self):
        assert build_common_parameters(self.creds, "Y") == {
            "AccessKey": "AK",
            "SecretKey": "SK",
            "PartnerTag": "Y",
            "Marketplace": "www.amazon.com",
            "PartnerType": "Associates",
        }
