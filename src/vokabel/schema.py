"""
Header resolution.

Spreadsheet exports are maintained by hand, so the same column shows up as
"Sr No", "Sr No." or "SrNo", with stray spaces and mixed casing. Each dataset
kind declares an ordered list of rules; every rule claims the first header not
already claimed by an earlier rule. The result is an immutable mapping from
canonical field to column index (-1 when absent).
"""

import re
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from .models import DatasetKind

Matcher = Callable[[str], bool]

LANGUAGE_MARKERS = ("german", "deutsch")


def normalize_header(header: str) -> str:
    """Lowercases and collapses whitespace: '  German   Word ' -> 'german word'."""
    return " ".join(header.strip().strip('"').lower().split())


def _compact(header: str) -> str:
    return re.sub(r"[^a-z0-9äöüß]", "", header)


def _words(header: str) -> List[str]:
    return re.findall(r"[a-z0-9äöüß]+", header)


# --- Matchers ---
def exact(*names: str) -> Matcher:
    targets = {_compact(name) for name in names}
    return lambda header: _compact(header) in targets


def contains(*fragments: str) -> Matcher:
    return lambda header: all(fragment in header for fragment in fragments)


def any_of(*matchers: Matcher) -> Matcher:
    return lambda header: any(matcher(header) for matcher in matchers)


def sequence_number(header: str) -> bool:
    compact = _compact(header)
    return "srno" in compact or compact in ("serialno", "serialnumber", "no", "nr")


def target_word(header: str) -> bool:
    return "word" in header and any(marker in header for marker in LANGUAGE_MARKERS)


def starts_with_words(*tokens: str) -> Matcher:
    return lambda header: tuple(_words(header)[: len(tokens)]) == tokens


def person_column(tokens: Tuple[str, ...], ordinal: str, number: str) -> Matcher:
    """Matches 'er/sie/es', 'er sie es (he)', or '3rd person singular'."""
    descriptive = contains(ordinal, "person", number)
    return any_of(starts_with_words(*tokens), descriptive)


class FieldRule(NamedTuple):
    field: str
    matcher: Matcher
    required: bool = False


NOUN_RULES: Tuple[FieldRule, ...] = (
    FieldRule("sequence_number", sequence_number, required=True),
    FieldRule("noun", exact("noun"), required=True),
    FieldRule("target_word", target_word, required=True),
    FieldRule("article", exact("article"), required=True),
    FieldRule("gender", exact("gender"), required=True),
    FieldRule("plural", exact("plural")),
    FieldRule("example", contains("example")),
)

VERB_CONJUGATION_RULES: Tuple[FieldRule, ...] = (
    FieldRule("infinitive", exact("infinitive"), required=True),
    FieldRule("meaning", exact("meaning"), required=True),
    FieldRule("ich", person_column(("ich",), "1st", "singular"), required=True),
    FieldRule("du", person_column(("du",), "2nd", "singular")),
    FieldRule("er_sie_es", person_column(("er", "sie"), "3rd", "singular")),
    FieldRule("wir", person_column(("wir",), "1st", "plural")),
    FieldRule("ihr", person_column(("ihr",), "2nd", "plural")),
    FieldRule(
        "sie_sie",
        any_of(person_column(("sie",), "3rd", "plural"), contains("formal")),
    ),
    FieldRule(
        "past",
        any_of(contains("präteritum"), lambda h: "past" in h and "participle" not in h),
    ),
    FieldRule("past_participle", any_of(contains("participle"), exact("partizip ii"))),
    FieldRule("auxiliary", exact("auxiliary")),
    FieldRule("prepositions", exact("prepositions", "preposition")),
    FieldRule("example_sentence", contains("example")),
    FieldRule("notes", exact("notes", "note")),
)

VERB_PERSON_RULES: Tuple[FieldRule, ...] = (
    FieldRule("sequence_number", sequence_number, required=True),
    FieldRule("verb", exact("verb"), required=True),
    FieldRule("target_word", target_word, required=True),
    FieldRule("person", exact("person"), required=True),
    FieldRule("conjugation", contains("conjugation"), required=True),
    FieldRule("example", contains("example")),
)

RULES: Dict[DatasetKind, Tuple[FieldRule, ...]] = {
    DatasetKind.NOUNS: NOUN_RULES,
    DatasetKind.VERBS_CONJUGATION: VERB_CONJUGATION_RULES,
    DatasetKind.VERBS_PERSON: VERB_PERSON_RULES,
}


class HeaderMap:
    """Canonical field -> column index for one header row."""

    def __init__(self, indices: Dict[str, int], rules: Sequence[FieldRule]):
        self._indices: Mapping[str, int] = MappingProxyType(dict(indices))
        self.required = tuple(rule.field for rule in rules if rule.required)

    def __getitem__(self, field: str) -> int:
        return self._indices.get(field, -1)

    def __contains__(self, field: str) -> bool:
        return self[field] >= 0

    def items(self):
        return self._indices.items()

    @property
    def missing(self) -> List[str]:
        return [field for field in self.required if field not in self]

    @property
    def is_complete(self) -> bool:
        return not self.missing

    @property
    def min_width(self) -> int:
        """Fields a data row must have to reach every required column."""
        return max((self[field] for field in self.required), default=-1) + 1

    def as_dict(self) -> Dict[str, int]:
        return dict(self._indices)

    def __repr__(self) -> str:
        return f"HeaderMap({dict(self._indices)!r})"


def resolve_headers(headers: Sequence[str], rules: Sequence[FieldRule]) -> HeaderMap:
    normalized = [normalize_header(header) for header in headers]
    claimed = set()
    indices: Dict[str, int] = {}
    for rule in rules:
        indices[rule.field] = -1
        for position, header in enumerate(normalized):
            if position in claimed or not header:
                continue
            if rule.matcher(header):
                indices[rule.field] = position
                claimed.add(position)
                break
    return HeaderMap(indices, rules)


def rules_for(kind: DatasetKind) -> Tuple[FieldRule, ...]:
    return RULES[kind]


def resolve_for(headers: Sequence[str], kind: DatasetKind) -> Optional[HeaderMap]:
    """Returns the header map, or None when a required field is unresolved."""
    header_map = resolve_headers(headers, rules_for(kind))
    return header_map if header_map.is_complete else None
