"""Ordered indexing-policy rules evaluated first-match-wins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

ROBOTS_HEADER_NAME: Final[str] = "X-Robots-Tag"


@dataclass(frozen=True)
class IndexingRule:
    """One `(path prefix, directive)` policy entry.

    Attributes:
        path_prefix: Prefix matched against the request path.
        directive: `X-Robots-Tag` value for matching paths.
    """

    path_prefix: str
    directive: str


@dataclass(frozen=True)
class IndexingPolicy:
    """Site-wide default directive plus narrow prefix overrides.

    Attributes:
        rules: Overrides evaluated in order, first match wins.
        default_directive: Directive for paths matching no rule.
    """

    rules: tuple[IndexingRule, ...]
    default_directive: str

    def indexing_resolve_directive(self, path: str) -> str:
        """Return the directive for one request path.

        Args:
            path: Request path.

        Returns:
            str: Directive of the first matching rule, else the default.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        for rule in self.rules:
            if path.startswith(rule.path_prefix):
                return rule.directive
        return self.default_directive


def indexing_build_policy(
    share_prefixes: tuple[str, ...],
    share_directive: str = "index, follow",
    default_directive: str = "noindex, nofollow",
) -> IndexingPolicy:
    """Build the policy that re-enables indexing for the share route family only.

    Args:
        share_prefixes: Share and preview-image path prefixes.
        share_directive: Directive for share routes.
        default_directive: Site-wide restrictive directive.

    Returns:
        IndexingPolicy: Ordered policy.

    Raises:
        ValueError: Raised when a directive is blank.
    """

    if not share_directive.strip() or not default_directive.strip():
        raise ValueError("robots directives must not be blank")

    return IndexingPolicy(
        rules=tuple(IndexingRule(path_prefix=prefix, directive=share_directive) for prefix in share_prefixes),
        default_directive=default_directive,
    )
