"""
esmapper Config — Default Index Settings
========================================

Holds the analysis template every new index starts from. Callers extend it
with their own filters and analyzers; an entry that already exists is never
replaced, so the first registration of a name wins.
"""

import copy
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


# Settings template — copied into every index at creation time
DEFAULT_SETTINGS: Dict[str, Any] = {
    "analysis": {
        "filter": {
            "autocomplete_filter": {
                "type": "edge_ngram",
                "min_gram": 1,
                "max_gram": 20
            }
        },
        "analyzer": {
            "autocomplete": {
                "type": "custom",
                "tokenizer": "standard",
                "filter": ["lowercase", "autocomplete_filter"]
            },
            "autocomplete_search": {
                "type": "custom",
                "tokenizer": "standard",
                "filter": ["lowercase"]
            }
        }
    }
}


class ConfigurationStore:
    """
    Default settings shared by indices created through one Mapper.

    Example:
        store = ConfigurationStore()
        store.merge(filters={"my_stop": {"type": "stop", "stopwords": "_english_"}})
        store.settings["analysis"]["filter"]["my_stop"]
    """

    def __init__(self, template: Optional[Dict[str, Any]] = None):
        self._template = template if template is not None else DEFAULT_SETTINGS
        self.settings: Dict[str, Any] = {}
        self.reset()

    @property
    def filters(self) -> Dict[str, Any]:
        return self.settings["analysis"]["filter"]

    @property
    def analyzers(self) -> Dict[str, Any]:
        return self.settings["analysis"]["analyzer"]

    def merge(
        self,
        filters: Optional[Dict[str, Any]] = None,
        analyzers: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Add filters and analyzers that are not registered yet.

        Args:
            filters: Filter name -> filter definition
            analyzers: Analyzer name -> analyzer definition
        """
        self._add_missing("filter", self.filters, filters)
        self._add_missing("analyzer", self.analyzers, analyzers)

    def _add_missing(
        self,
        kind: str,
        registered: Dict[str, Any],
        entries: Optional[Dict[str, Any]]
    ) -> None:
        for name, definition in (entries or {}).items():
            if name in registered:
                logger.debug(f"Skipping {kind} '{name}': already registered")
                continue
            registered[name] = definition

    def reset(self) -> None:
        """Restore the built-in template."""
        self.settings = copy.deepcopy(self._template)
        analysis = self.settings.setdefault("analysis", {})
        analysis.setdefault("filter", {})
        analysis.setdefault("analyzer", {})

    def snapshot(self) -> Dict[str, Any]:
        """Deep copy of the current defaults, as handed to a new index."""
        return copy.deepcopy(self.settings)
