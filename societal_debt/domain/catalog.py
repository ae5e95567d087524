"""Practice catalog - metadata lookup keyed by opaque practice labels"""

import sys
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

from societal_debt.domain.models import UNCATEGORIZED, PracticeAssignment, Polarity, Remediation

# Charity search hints for labels the classifier commonly emits
DEFAULT_SEARCH_TERMS: Dict[str, str] = {
    "Factory Farming": "animal welfare",
    "High Emissions": "climate",
    "Environmental Degradation": "conservation",
    "Water Waste": "water conservation",
    "Resource Depletion": "sustainability",
    "Data Privacy Issues": "digital rights",
    "Labor Exploitation": "workers rights",
    "Excessive Packaging": "environment",
    "Animal Testing": "animal rights",
    "High Energy Usage": "renewable energy",
    "Content Diversity": "media diversity",
    "Sustainable Materials": "sustainability",
    "Ethical Investment": "ethical finance",
}


def default_search_term(practice_label: str) -> str:
    """Charity search term for a label without one from the classifier"""
    return DEFAULT_SEARCH_TERMS.get(practice_label, practice_label.lower())


@dataclass(frozen=True)
class PracticeMetadata:
    """Everything known about a practice apart from its amounts"""

    practice_label: str
    polarity: Polarity
    category: str = UNCATEGORIZED
    remediation: Optional[Remediation] = None
    search_term: str = ""


class PracticeCatalog:
    """
    Lookup table from interned practice label to its metadata.

    Labels are treated as opaque keys (they may carry decorative glyphs);
    the first registration of a label is authoritative.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, PracticeMetadata] = {}

    @classmethod
    def from_assignments(cls, assignments: Iterable[PracticeAssignment]) -> "PracticeCatalog":
        catalog = cls()
        for assignment in assignments:
            catalog.register(assignment)
        return catalog

    def register(self, assignment: PracticeAssignment) -> PracticeMetadata:
        """Record metadata for a label unless it is already known"""
        key = sys.intern(assignment.practice_label)
        existing = self._entries.get(key)
        if existing is not None:
            return existing

        metadata = PracticeMetadata(
            practice_label=key,
            polarity=assignment.polarity,
            category=assignment.category or UNCATEGORIZED,
            remediation=assignment.remediation,
            search_term=assignment.search_term or default_search_term(key),
        )
        self._entries[key] = metadata
        return metadata

    def get(self, practice_label: str) -> Optional[PracticeMetadata]:
        return self._entries.get(practice_label)

    def __contains__(self, practice_label: object) -> bool:
        return practice_label in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
