"""
Report, Personnel and Store Ingestion Service

This module is the coercion boundary between the loosely typed collections
fetched by the dashboard (numbers stored as strings, missing keys, nulls)
and the typed records the rest of the core works with.

Coercion Rules:
- Numeric fields (gmv, adCost, orders, totalViews, viewers, productClicks,
  baseSalary, monthlyKPITarget) become finite floats; missing, null,
  non-numeric, NaN and infinite values become 0
- Report dates are parsed to calendar days; rows without a usable date are
  dropped and reported, since they cannot be bucketed
- Shift labels accept English names and the Vietnamese dashboard labels
  (Sáng, Chiều, Tối), with or without accents or a "Ca" prefix
- Text fields are stripped; null becomes ""

Nothing in this module raises for bad data. Issues are collected as
ValidationError entries on the IngestionResult and logged.
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from live_dashboard.models import (
    IngestionResult,
    PersonRecord,
    ReportRecord,
    Shift,
    StoreRecord,
    ValidationError,
)
from live_dashboard.services.name_matching import strip_diacritics_name


# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

REPORT_NUMERIC_COLUMNS: List[str] = [
    'gmv',
    'adCost',
    'orders',
    'totalViews',
    'viewers',
    'productClicks',
]

REPORT_TEXT_COLUMNS: List[str] = [
    'channelId',
    'hostName',
    'reporter',
]

PERSONNEL_NUMERIC_COLUMNS: List[str] = [
    'baseSalary',
    'monthlyKPITarget',
]

# Plain (diacritic-stripped) shift labels
SHIFT_ALIASES: Dict[str, Shift] = {
    'sang': Shift.MORNING,
    'morning': Shift.MORNING,
    'chieu': Shift.AFTERNOON,
    'afternoon': Shift.AFTERNOON,
    'toi': Shift.EVENING,
    'evening': Shift.EVENING,
    'chua xac dinh': Shift.UNSPECIFIED,
    'unspecified': Shift.UNSPECIFIED,
}

# Cap on per-row issues kept on a result; the count is still logged
MAX_REPORTED_ERRORS: int = 200


# =============================================================================
# SCALAR HELPERS
# =============================================================================

def safe_number(value: Any) -> float:
    """
    Convert a value to a finite float, returning 0.0 for anything unusable.

    Args:
        value: Any value read from a report row.

    Returns:
        The numeric value, or 0.0 for None, unparseable text, NaN and inf.

    Example:
        >>> safe_number("1500000")
        1500000.0
        >>> safe_number("n/a")
        0.0
        >>> safe_number(None)
        0.0
    """
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not np.isfinite(number):
        return 0.0
    return number


def parse_report_date(value: Any) -> Optional[date]:
    """
    Parse a report date to a calendar day.

    Accepts date/datetime objects, ISO strings (with or without a time part)
    and day-first strings such as "01/12/2025".

    Returns:
        The calendar day, or None when the value cannot be parsed.
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, float) and math.isnan(value):
        return None

    text = str(value).strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass

    parsed = pd.to_datetime(text, errors='coerce', dayfirst=True)
    if pd.isna(parsed):
        return None
    return parsed.date()


def parse_shift(value: Any) -> Optional[Shift]:
    """
    Map a shift label to a Shift.

    Returns:
        The Shift, or None when the label is blank or unknown.

    Example:
        >>> parse_shift("Sáng")
        <Shift.MORNING: 'morning'>
        >>> parse_shift("ca toi")
        <Shift.EVENING: 'evening'>
    """
    if isinstance(value, Shift):
        return value
    label = strip_diacritics_name(value)
    if not label:
        return None
    if label.startswith('ca '):
        label = label[3:]
    shift = SHIFT_ALIASES.get(label)
    if shift is None:
        logger.debug(f"Unknown shift label {value!r}; treating as unspecified")
    return shift


def _text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and math.isnan(value):
        return ''
    return str(value).strip()


def _optional_text(value: Any) -> Optional[str]:
    text = _text(value)
    return text or None


def _ensure_list(rows: Any, name: str) -> List[Any]:
    if not isinstance(rows, (list, tuple)):
        raise TypeError(f"{name} must be a list, got {type(rows).__name__}")
    return list(rows)


def _record_error(
    result: IngestionResult,
    field: str,
    message: str,
    row_number: Optional[int],
) -> None:
    if len(result.errors) < MAX_REPORTED_ERRORS:
        result.errors.append(ValidationError(
            field=field,
            message=message,
            row_number=row_number,
        ))


# =============================================================================
# DATAFRAME HELPERS
# =============================================================================

def _coerce_numeric_columns(
    df: pd.DataFrame,
    columns: Iterable[str],
    result: IngestionResult,
) -> pd.DataFrame:
    """
    Coerce numeric columns on a copy of the frame, recording non-blank
    values that could not be parsed.
    """
    df_result = df.copy()
    for col in columns:
        if col not in df_result.columns:
            df_result[col] = 0.0
            continue

        raw = df_result[col]
        numeric = pd.to_numeric(raw, errors='coerce')
        numeric = numeric.replace([np.inf, -np.inf], np.nan)

        blank = raw.isna() | raw.astype(str).str.strip().eq('')
        invalid_rows = df_result.index[numeric.isna() & ~blank].tolist()
        for idx in invalid_rows:
            _record_error(
                result,
                col,
                f"Non-numeric value {raw.loc[idx]!r} coerced to 0",
                int(idx) + 1,
            )

        df_result[col] = numeric.fillna(0).astype(float)
    return df_result


def _row_dicts(rows: List[Any]) -> List[Dict[str, Any]]:
    return [
        row.model_dump() if hasattr(row, 'model_dump') else dict(row)
        for row in rows
    ]


def _numeric_frame(
    records: List[Dict[str, Any]],
    columns: List[str],
    result: IngestionResult,
) -> List[Dict[str, float]]:
    """
    Coerce only the numeric columns through pandas.

    Text fields stay on the original dicts: a column with a missing key is
    upcast to float64, which would turn channelId 1 into "1.0".
    """
    df = pd.DataFrame(
        {col: [record.get(col) for record in records] for col in columns},
        index=range(len(records)),
        dtype=object,
    )
    df = _coerce_numeric_columns(df, columns, result)
    return df[columns].to_dict('records')


# =============================================================================
# INGESTION FUNCTIONS
# =============================================================================

def coerce_reports(rows: List[Dict[str, Any]]) -> Tuple[List[ReportRecord], IngestionResult]:
    """
    Coerce raw report rows into ReportRecord instances.

    Performs the following steps:
    1. Load the numeric columns into a DataFrame (missing keys become null)
    2. Coerce numeric columns to finite floats, 0 when unusable
    3. Parse dates; drop and report rows without a usable date
    4. Parse shifts and strip text fields

    Args:
        rows: Raw report rows (dicts or ReportRecord instances).

    Returns:
        Tuple of (records in input order, ingestion result).

    Raises:
        TypeError: If rows is not a list.
    """
    rows = _ensure_list(rows, 'reports')
    result = IngestionResult(rows_processed=len(rows))
    if not rows:
        return [], result

    raw_rows = _row_dicts(rows)
    numeric_rows = _numeric_frame(raw_rows, REPORT_NUMERIC_COLUMNS, result)

    records: List[ReportRecord] = []
    dropped = 0
    for position, (row, numbers) in enumerate(zip(raw_rows, numeric_rows)):
        report_date = parse_report_date(row.get('date'))
        if report_date is None:
            dropped += 1
            _record_error(
                result,
                'date',
                f"Unparseable date {row.get('date')!r}; row skipped",
                position + 1,
            )
            continue

        records.append(ReportRecord(
            id=_optional_text(row.get('id')),
            date=report_date,
            shift=parse_shift(row.get('shift')),
            **{col: _text(row.get(col)) for col in REPORT_TEXT_COLUMNS},
            **{col: float(numbers[col]) for col in REPORT_NUMERIC_COLUMNS},
        ))

    result.rows_accepted = len(records)
    if dropped:
        logger.warning(f"Dropped {dropped} of {len(rows)} report rows without a usable date")
    if result.errors:
        logger.info(f"Report ingestion recorded {len(result.errors)} data-quality issues")
    return records, result


def coerce_personnel(rows: List[Dict[str, Any]]) -> Tuple[List[PersonRecord], IngestionResult]:
    """
    Coerce raw personnel rows into PersonRecord instances.

    Rows without both id and fullName cannot be identified and are skipped.

    Raises:
        TypeError: If rows is not a list.
    """
    rows = _ensure_list(rows, 'personnel')
    result = IngestionResult(rows_processed=len(rows))
    if not rows:
        return [], result

    raw_rows = _row_dicts(rows)
    numeric_rows = _numeric_frame(raw_rows, PERSONNEL_NUMERIC_COLUMNS, result)

    records: List[PersonRecord] = []
    for position, (row, numbers) in enumerate(zip(raw_rows, numeric_rows)):
        person_id = _optional_text(row.get('id'))
        full_name = _text(row.get('fullName'))
        if not person_id and not full_name:
            _record_error(result, 'fullName', 'Personnel row without id or name; skipped', position + 1)
            continue

        records.append(PersonRecord(
            id=person_id,
            fullName=full_name,
            email=_optional_text(row.get('email')),
            role=_text(row.get('role')) or 'user',
            department=_optional_text(row.get('department')),
            position=_optional_text(row.get('position')),
            team=_optional_text(row.get('team')),
            baseSalary=float(numbers['baseSalary']),
            monthlyKPITarget=float(numbers['monthlyKPITarget']),
        ))

    result.rows_accepted = len(records)
    return records, result


def coerce_stores(rows: List[Dict[str, Any]]) -> Tuple[List[StoreRecord], IngestionResult]:
    """
    Coerce raw store rows into StoreRecord instances.

    Rows without an id cannot be referenced by reports and are skipped.

    Raises:
        TypeError: If rows is not a list.
    """
    rows = _ensure_list(rows, 'stores')
    result = IngestionResult(rows_processed=len(rows))

    records: List[StoreRecord] = []
    for position, data in enumerate(_row_dicts(rows)):
        store_id = _text(data.get('id'))
        if not store_id:
            _record_error(result, 'id', 'Store row without id; skipped', position + 1)
            continue
        records.append(StoreRecord(
            id=store_id,
            name=_text(data.get('name')),
            partnerId=_optional_text(data.get('partnerId')),
        ))

    result.rows_accepted = len(records)
    return records, result
