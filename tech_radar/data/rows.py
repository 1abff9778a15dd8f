"""Input row loading and parsing.

Rows are looked up by role, never by column position. Each role maps to
a header name (case- and whitespace-insensitive) through the `columns`
config section.
"""
import os
import csv
import json
import logging
import yaml
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

ROLES = ('name', 'sector', 'ring', 'description', 'isNew')
REQUIRED_ROLES = ('name', 'sector', 'ring')

DEFAULT_COLUMNS = {role: role for role in ROLES}

_TRUE_STRINGS = {'true', 't', 'yes', 'y', '1', 'new', 'x'}
_FALSE_STRINGS = {'false', 'f', 'no', 'n', '0', ''}


@dataclass
class RadarRow:
    """One parsed input row."""
    name: str
    sector: str
    ring: str
    description: str = ''
    is_new: bool = False
    number: Optional[int] = None  # 1-based ordinal among kept rows


def load_rows(path: str) -> List[Dict[str, Any]]:
    """Read raw records from a .csv, .json, .yaml or .yml file.

    JSON/YAML files may hold a list of mappings or a mapping with a
    'rows' list.
    """
    ext = os.path.splitext(path)[1].lower()
    if ext == '.csv':
        with open(path, newline='', encoding='utf-8-sig') as f:
            records = list(csv.DictReader(f))
    elif ext in ('.json', '.yaml', '.yml'):
        with open(path, encoding='utf-8') as f:
            data = json.load(f) if ext == '.json' else yaml.safe_load(f)
        if isinstance(data, dict):
            data = data.get('rows', [])
        if not isinstance(data, list):
            raise ValueError(f"{path}: expected a list of rows, got {type(data).__name__}")
        records = data
    else:
        raise ValueError(f"Unsupported row file type '{ext}' ({path})")

    logger.info(f"Loaded {len(records)} raw rows from {path}")
    return records


def _normalize_header(header: Any) -> str:
    return str(header).strip().lower()


def _clean(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def parse_bool(value: Any) -> bool:
    """Interpret an isNew cell. Unknown strings count as False."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text not in _FALSE_STRINGS:
        logger.warning(f"Unrecognised isNew value {value!r}; treating as False")
    return False


def parse_rows(records: Iterable[Mapping[str, Any]],
               columns: Optional[Mapping[str, str]] = None) -> List[RadarRow]:
    """Turn raw records into RadarRows.

    A record missing name, sector or ring is dropped with a warning; the
    rest of the input is unaffected. Missing description -> '', missing
    isNew -> False.
    """
    column_map = dict(DEFAULT_COLUMNS)
    if columns:
        column_map.update(columns)
    wanted = {role: _normalize_header(header) for role, header in column_map.items()}

    rows = []
    n_dropped = 0
    for i, record in enumerate(records):
        if not isinstance(record, Mapping):
            logger.warning(f"Row {i + 1}: not a mapping ({type(record).__name__}); dropped")
            n_dropped += 1
            continue

        by_header = {_normalize_header(k): v for k, v in record.items() if k is not None}
        values = {role: by_header.get(header) for role, header in wanted.items()}

        missing = [role for role in REQUIRED_ROLES if not _clean(values[role])]
        if missing:
            logger.warning(f"Row {i + 1}: missing {', '.join(missing)}; dropped")
            n_dropped += 1
            continue

        rows.append(RadarRow(
            name=_clean(values['name']),
            sector=_clean(values['sector']),
            ring=_clean(values['ring']),
            description=_clean(values['description']),
            is_new=parse_bool(values['isNew']),
            number=len(rows) + 1,
        ))

    logger.info(f"Parsed {len(rows)} rows ({n_dropped} dropped)")
    return rows
