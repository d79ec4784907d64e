"""The canonical query and its serialized forms."""

from .calculations import (
    CALCULATION_BUILDERS,
    GrowthCalculation,
    QueryCalculation,
    RcaCalculation,
    TopkCalculation,
    build_calculation,
)
from .descriptors import QueryDescriptor, extract_query_to_json, hydrate_query_from_json
from .formatters import query_to_query_string, query_to_source, query_to_summary
from .params import Drillable, Pagination, QueryCut, QueryFilter, Sorting, TimeFrame
from .query import Query
from .urls import apply_parse_url_rules, match_cube_name_from_url, params_from_url

__all__ = [
    "Query",
    "QueryCut",
    "QueryFilter",
    "Pagination",
    "Sorting",
    "TimeFrame",
    "Drillable",
    "GrowthCalculation",
    "RcaCalculation",
    "TopkCalculation",
    "QueryCalculation",
    "CALCULATION_BUILDERS",
    "build_calculation",
    "QueryDescriptor",
    "extract_query_to_json",
    "hydrate_query_from_json",
    "query_to_source",
    "query_to_summary",
    "query_to_query_string",
    "params_from_url",
    "apply_parse_url_rules",
    "match_cube_name_from_url",
]
