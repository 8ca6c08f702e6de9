"""
Object search: query value types and the POST /<ObjectClass> call.

A query is an OR of filter groups; each group is an AND of Filters.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, List

from .api import invoke
from .constants import COMPUTERS_CLASS, OP_EQUAL


@dataclass(frozen=True)
class Filter:
    name: str
    value: Any
    operation: str = OP_EQUAL

    def to_dict(self):
        return {"name": self.name, "value": self.value, "operation": self.operation}


@dataclass
class SearchParams:
    filters: List[List[Filter]] = field(default_factory=list)
    sort: List[dict] = field(default_factory=list)
    fields: List[List[str]] = field(default_factory=list)

    def copy(self) -> "SearchParams":
        """Deep copy, so tier-specific edits never reach the template."""
        return copy.deepcopy(self)

    def to_payload(self):
        return {
            "filters": [[f.to_dict() for f in group] for group in self.filters],
            "sort": [dict(s) for s in self.sort],
            "fields": [list(group) for group in self.fields],
        }


def search_objects(credentials, token, base_url, object_class, params,
                   max_tries=0, timeout=None):
    """Search records of `object_class`. Returns the result envelope."""
    return invoke(
        credentials, token, base_url,
        endpoint=object_class,
        params=params.to_payload(),
        method="POST",
        max_tries=max_tries,
        timeout=timeout,
    )


def search_computers(credentials, token, base_url, params, max_tries=0, timeout=None):
    return search_objects(credentials, token, base_url, COMPUTERS_CLASS, params,
                          max_tries=max_tries, timeout=timeout)
