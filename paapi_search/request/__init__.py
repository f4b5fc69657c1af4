from .builder import build_common_parameters, build_request_parameters, resolve_partner_tag
from .options import AdditionalOptions, SearchCriteria, SearchFilters, SearchOptions

__all__ = [
    "AdditionalOptions",
    "SearchCriteria",
    "SearchFilters",
    "SearchOptions",
    "build_common_parameters",
    "build_request_parameters",
    "resolve_partner_tag",
]
