"""Request classification and indexing-policy rules."""

from .classifier import KNOWN_CRAWLER_USER_AGENTS, SHARE_ROUTE_PREFIXES, RequestClassifier
from .indexing import ROBOTS_HEADER_NAME, IndexingPolicy, IndexingRule, indexing_build_policy

__all__ = [
    "IndexingPolicy",
    "IndexingRule",
    "KNOWN_CRAWLER_USER_AGENTS",
    "ROBOTS_HEADER_NAME",
    "RequestClassifier",
    "SHARE_ROUTE_PREFIXES",
    "indexing_build_policy",
]
