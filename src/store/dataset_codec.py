"""JSON encoding of generation keys and Datasets.

Decoding is strict: anything that does not match the current schema raises
DatasetFormatError, which callers treat as "nothing cached".
"""

import json
import math
from datetime import date
from typing import Any, Dict, Optional

from model.EarningsData import Category, Dataset, GenerationKey, PeriodRecord, to_cents


SCHEMA_VERSION = 3


class DatasetFormatError(ValueError):
    """Stored data could not be decoded into a Dataset."""


def _optional_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def encode_key(key: GenerationKey) -> Dict[str, Any]:
    return {
        'version': key.version,
        'granularity': key.granularity,
        'periodCount': key.period_count,
        'calendarDay': key.calendar_day.isoformat(),
        'minBalance': key.min_balance,
        'minPending': key.min_pending,
        'totalNet': key.total_net,
        'oldestAnchor': key.oldest_anchor.isoformat() if key.oldest_anchor else None,
        'overrideGross': key.override_gross,
    }


def decode_key(data: Dict[str, Any]) -> GenerationKey:
    try:
        return GenerationKey(
            version=data['version'],
            granularity=data['granularity'],
            period_count=int(data['periodCount']),
            calendar_day=date.fromisoformat(data['calendarDay']),
            min_balance=float(data.get('minBalance', 0.0)),
            min_pending=float(data.get('minPending', 0.0)),
            total_net=None if data.get('totalNet') is None else float(data['totalNet']),
            oldest_anchor=_optional_date(data.get('oldestAnchor')),
            override_gross=None if data.get('overrideGross') is None else float(data['overrideGross']),
        )
    except (KeyError, TypeError, ValueError, OverflowError) as e:
        raise DatasetFormatError(f"Invalid generation key: {e}") from e


def encode_record(record: PeriodRecord) -> Dict[str, Any]:
    return {
        'index': record.index,
        'granularity': record.granularity,
        'start': record.start.isoformat(),
        'net': record.net,
        'gross': record.gross,
        'categories': {category.value: amount for category, amount in record.categories.items()},
        'transactionCount': record.transaction_count,
    }


def _finite(value: Any, name: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} is not a finite number: {value!r}")
    return number


def decode_record(data: Dict[str, Any]) -> PeriodRecord:
    try:
        record = PeriodRecord(
            index=int(data['index']),
            granularity=data['granularity'],
            start=date.fromisoformat(data['start']),
            net=_finite(data['net'], 'net'),
            gross=_finite(data['gross'], 'gross'),
            categories={Category.parse(name): _finite(amount, name)
                        for name, amount in data['categories'].items()},
            transaction_count=int(data.get('transactionCount', 0)),
        )
    except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as e:
        raise DatasetFormatError(f"Invalid period record: {e}") from e
    # A record whose split no longer adds up is as good as corrupt
    try:
        balanced = abs(to_cents(record.category_total()) - to_cents(record.net)) <= 1
    except OverflowError as e:
        raise DatasetFormatError(f"Period {record.index} amounts are out of range: {e}") from e
    if not balanced:
        raise DatasetFormatError(f"Period {record.index} categories do not sum to its net")
    return record


def encode_dataset(dataset: Dataset) -> Dict[str, Any]:
    return {
        'records': [encode_record(r) for r in dataset.records],
        'key': encode_key(dataset.key) if dataset.key else None,
        'pattern': dataset.pattern,
        'seed': dataset.seed,
        'profile': dataset.profile,
        'fromPreset': dataset.from_preset,
    }


def decode_dataset(data: Dict[str, Any]) -> Dataset:
    if not isinstance(data, dict) or not isinstance(data.get('records'), list):
        raise DatasetFormatError("Dataset must be an object with a records list")
    records = tuple(decode_record(r) for r in data['records'])
    try:
        return Dataset(
            records=records,
            key=decode_key(data['key']) if data.get('key') else None,
            pattern=str(data.get('pattern', 'consistent')),
            seed=int(data.get('seed', 0)),
            profile=str(data.get('profile', 'messages-dominant')),
            from_preset=bool(data.get('fromPreset', False)),
        )
    except (TypeError, ValueError, OverflowError) as e:
        raise DatasetFormatError(f"Invalid dataset: {e}") from e


def dumps_snapshot(key: GenerationKey, dataset: Dataset) -> str:
    """Serialize the key and Dataset stored together in one cache entry."""
    return json.dumps({
        'schema': SCHEMA_VERSION,
        'key': key.as_string(),
        'dataset': encode_dataset(dataset),
    })


def loads_snapshot(text: str) -> tuple:
    """Parse a cache entry.

    Returns:
        Tuple of (key fingerprint string, Dataset)

    Raises:
        DatasetFormatError: the text is not a valid snapshot of this schema
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise DatasetFormatError(f"Snapshot is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise DatasetFormatError("Snapshot must be a JSON object")
    if data.get('schema') != SCHEMA_VERSION:
        raise DatasetFormatError(f"Unsupported snapshot schema {data.get('schema')!r}")
    key = data.get('key')
    if not isinstance(key, str):
        raise DatasetFormatError("Snapshot key must be a string")
    return key, decode_dataset(data.get('dataset'))
