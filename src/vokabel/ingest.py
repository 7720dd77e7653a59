import io
import logging
from typing import Dict, List, Optional

import httpx
import pandas as pd

from .config import settings
from .errors import FetchError, ParseError
from .models import (
    DatasetKind,
    Gender,
    NounRecord,
    Person,
    Record,
    VerbConjugationRecord,
    VerbPersonRecord,
)
from .schema import HeaderMap, normalize_header, resolve_for

logger = logging.getLogger(__name__)

RECORD_TYPES = {
    DatasetKind.NOUNS: NounRecord,
    DatasetKind.VERBS_CONJUGATION: VerbConjugationRecord,
    DatasetKind.VERBS_PERSON: VerbPersonRecord,
}

# Cells that must be non-empty for a row to become a record. Gender and person
# are normalized with a fallback before this check, so they never fail it.
NON_EMPTY_FIELDS = {
    DatasetKind.NOUNS: ("noun", "target_word", "article"),
    DatasetKind.VERBS_CONJUGATION: ("infinitive", "meaning", "ich"),
    DatasetKind.VERBS_PERSON: ("verb", "target_word", "conjugation"),
}

# Person columns missing from a schema A sheet repeat the "ich" column.
PERSON_FALLBACK_FIELDS = ("du", "er_sie_es", "wir", "ihr", "sie_sie")


# --- Enum normalization ---
def normalize_gender(value: str) -> Gender:
    text = value.strip().lower()
    if "masculine" in text:
        return Gender.MASCULINE
    if "feminine" in text:
        return Gender.FEMININE
    if "neutral" in text or "neuter" in text:
        return Gender.NEUTRAL
    return Gender.NEUTRAL


def normalize_person(value: str) -> Person:
    text = " ".join(value.strip().lower().replace("/", " ").split())
    if text.startswith("er sie") or text == "er" or text == "es":
        return Person.ER_SIE_ES
    if text.startswith("sie") or "formal" in text:
        return Person.SIE_SIE
    if text.startswith("ihr"):
        return Person.IHR
    if text.startswith("wir"):
        return Person.WIR
    if text.startswith("du"):
        return Person.DU
    if text.startswith("ich"):
        return Person.ICH
    return Person.ICH


# --- Reading ---
def split_lines(text: str) -> List[str]:
    """Splits raw text into lines, dropping the blank ones."""
    return [line for line in text.splitlines() if line.strip()]


def _strip_cell(value):
    return value.strip() if isinstance(value, str) else value


def read_table(raw_text: str) -> pd.DataFrame:
    """
    Reads the export into a frame of stripped string cells, header row included.

    Columns are numbered; fields missing from short rows are NaN, so the
    number of non-null cells in a row is the number of fields it had.
    """
    lines = split_lines(raw_text)
    if not lines:
        return pd.DataFrame()

    # Upper bound on the field count: quoted separators only overcount.
    width = max(line.count(",") for line in lines) + 1
    try:
        frame = pd.read_csv(
            io.StringIO("\n".join(lines)),
            header=None,
            names=list(range(width)),
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            skip_blank_lines=True,
        )
    except pd.errors.ParserError as e:
        raise ParseError(f"Malformed delimited text: {e}") from e
    return frame.map(_strip_cell)


# --- Row decoding ---
def _column(frame: pd.DataFrame, index: int) -> pd.Series:
    if index < 0 or index not in frame.columns:
        return pd.Series("", index=frame.index, dtype=object)
    return frame[index]


def _parse_sequence_numbers(column: pd.Series) -> pd.Series:
    """Leading-integer parse; anything else becomes NaN."""
    digits = column.str.extract(r"^([+-]?\d+)", expand=False)
    return pd.to_numeric(digits, errors="coerce")


def _build_table(frame: pd.DataFrame, header_map: HeaderMap, kind: DatasetKind) -> pd.DataFrame:
    table = pd.DataFrame(
        {field: _column(frame, index) for field, index in header_map.items()},
        index=frame.index,
    )
    if kind is DatasetKind.VERBS_CONJUGATION:
        for field in PERSON_FALLBACK_FIELDS:
            if field not in header_map:
                table[field] = table["ich"]
    return table


def decode_rows(rows: pd.DataFrame, header_map: HeaderMap, kind: DatasetKind) -> List[Record]:
    """Decodes the data rows of a frame produced by ``read_table``."""
    if rows.empty:
        return []

    rows = rows.reset_index(drop=True)
    widths = rows.notna().sum(axis=1)
    frame = rows.fillna("").astype(str)

    keep = widths >= header_map.min_width
    keep &= ~(frame.apply(lambda column: column.str.strip() == "").all(axis=1))

    table = _build_table(frame, header_map, kind)

    if "sequence_number" in header_map:
        numbers = _parse_sequence_numbers(table["sequence_number"])
        keep &= numbers > 0
        table["sequence_number"] = numbers

    for field in NON_EMPTY_FIELDS[kind]:
        keep &= table[field] != ""

    table = table[keep].copy()
    if table.empty:
        return []

    if "sequence_number" in table.columns:
        table["sequence_number"] = table["sequence_number"].astype(int)
    if "gender" in table.columns:
        table["gender"] = table["gender"].map(normalize_gender)
    if "person" in table.columns:
        table["person"] = table["person"].map(normalize_person)

    record_type = RECORD_TYPES[kind]
    fields = set(record_type.model_fields)
    records: List[Record] = []
    for row in table.to_dict("records"):
        values = {key: value for key, value in row.items() if key in fields}
        if "sequence_number" in values:
            values["sequence_number"] = int(values["sequence_number"])
        records.append(record_type(**values))
    return records


def ingest(raw_text: str, kind: DatasetKind) -> List[Record]:
    """
    Decodes a comma-separated export into records of the given kind.

    Best effort: rows that cannot be decoded are skipped, and a header that
    lacks a required column produces an empty list rather than an error.
    """
    if not isinstance(raw_text, str):
        raise ParseError(f"Expected text, got {type(raw_text).__name__}")
    try:
        kind = DatasetKind(kind)
    except ValueError as e:
        raise ParseError(f"Unknown dataset kind: {kind}") from e

    rows = read_table(raw_text)
    if len(rows) < 2:
        logger.warning(f"Dataset '{kind.value}' has no data rows ({len(rows)} lines).")
        return []

    headers = rows.iloc[0].fillna("").tolist()
    header_map = resolve_for(headers, kind)
    if header_map is None:
        logger.error(f"Skipping dataset '{kind.value}': missing columns. Headers: {headers}")
        return []

    records = decode_rows(rows.iloc[1:], header_map, kind)
    skipped = len(rows) - 1 - len(records)
    if skipped:
        logger.info(f"Skipped {skipped} rows of dataset '{kind.value}'.")
    return records


# --- Fetching ---
async def fetch_dataset(url: str, client: Optional[httpx.AsyncClient] = None) -> str:
    """Fetches the raw export once. Any failure surfaces as FetchError."""
    try:
        if client is None:
            async with httpx.AsyncClient(
                timeout=settings.FETCH_TIMEOUT, follow_redirects=True
            ) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url)
    except httpx.HTTPError as e:
        raise FetchError(url, reason=str(e) or type(e).__name__) from e

    if not response.is_success:
        raise FetchError(url, status=response.status_code, reason=response.reason_phrase)
    return response.text


def looks_like_noun_sheet(raw_text: str) -> bool:
    lines = split_lines(raw_text)
    first_line = normalize_header(lines[0]) if lines else ""
    return "noun" in first_line and "gender" in first_line and "infinitive" not in first_line


class DatasetLoader:
    """Fetches and decodes the dataset behind each dataset kind."""

    def __init__(
        self,
        urls: Optional[Dict[DatasetKind, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.urls = urls or {
            DatasetKind.NOUNS: settings.NOUNS_CSV_URL,
            DatasetKind.VERBS_CONJUGATION: settings.VERBS_CSV_URL,
            DatasetKind.VERBS_PERSON: settings.VERBS_CSV_URL,
        }
        self.transport = transport

    async def fetch(self, kind: DatasetKind) -> str:
        url = self.urls[kind]
        if self.transport is None:
            return await fetch_dataset(url)
        async with httpx.AsyncClient(
            transport=self.transport, timeout=settings.FETCH_TIMEOUT
        ) as client:
            return await fetch_dataset(url, client=client)

    async def load(self, kind: DatasetKind) -> List[Record]:
        raw_text = await self.fetch(kind)

        if kind is not DatasetKind.NOUNS and looks_like_noun_sheet(raw_text):
            logger.warning(
                f"The verbs URL appears to serve the noun worksheet: {self.urls[kind]}. "
                "Point VOKABEL_VERBS_CSV_URL at the verb worksheet gid."
            )

        records = ingest(raw_text, kind)
        if records:
            logger.info(f"Loaded {len(records)} records for '{kind.value}'")
        else:
            logger.warning(f"No records decoded for '{kind.value}' from {self.urls[kind]}")
        return records
