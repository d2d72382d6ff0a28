from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path


TIME_COLUMN_CANDIDATES = ('time', 't_', 't')
POSITION_COLUMN_CANDIDATES = ('position', 'pos', 'value', 'x')

# "time_ms", "t_ms", "time (ms)", "time [ms]".
_MS_UNIT = re.compile(r'(?:^|_)ms$|[(\[]\s*ms\s*[)\]]')


@dataclass
class TimeSeries:
    time_s: list[float]
    values: list[float]


def _detect_delimiter(header_line: str) -> str:
    semicolons = header_line.count(";")
    commas = header_line.count(",")
    return ";" if semicolons >= commas and semicolons > 0 else ","


def _parse_number(s: str, delimiter: str) -> float:
    s = s.strip()
    # Decimal comma only makes sense when the columns are not comma separated.
    if delimiter == ";":
        s = s.replace(",", ".")
    return float(s)


def _header_name(h: str) -> str:
    """Header without a trailing unit annotation: "t (ms)" -> "t"."""
    return re.split(r'[\s(\[]', h, maxsplit=1)[0]


def _matches(header: str, candidate: str) -> bool:
    # Single letters would match almost any header as a substring.
    if len(candidate) == 1:
        return _header_name(header) == candidate
    return candidate in header


def _find_col(headers: list[str], candidates: Iterable[str]) -> int:
    candidates = [c.lower() for c in candidates]
    for c in candidates:
        for i, h in enumerate(headers):
            if h and _matches(h, c):
                return i
    return -1


def _time_is_ms(header: str) -> bool:
    return _MS_UNIT.search(header) is not None


def parse_trajectory_csv(
    path: Path,
    time_candidates: Iterable[str] = TIME_COLUMN_CANDIDATES,
    value_candidates: Iterable[str] = POSITION_COLUMN_CANDIDATES,
) -> TimeSeries:
    """
    Read a (time, position) series from a CSV file.

    The first non-comment line is the header; columns are matched by substring
    (single-letter names such as "t" only match the whole header name).
    A time header with an ms unit ("time_ms", "time (ms)") is converted to seconds.
    Rows that do not parse are skipped.
    """
    text = path.read_text(encoding="utf-8", errors="ignore")
    lines = [l.strip() for l in text.splitlines() if l.strip() and not l.strip().startswith("#")]
    if not lines:
        raise ValueError(f"Empty trajectory file: {path.name}")

    header_line = lines[0]
    delimiter = _detect_delimiter(header_line)
    headers = [h.strip().lower() for h in header_line.split(delimiter)]

    col_time = _find_col(headers, time_candidates)
    value_headers = [h if i != col_time else "" for i, h in enumerate(headers)]
    col_val = _find_col(value_headers, value_candidates)

    if col_time == -1 or col_val == -1:
        raise ValueError(f"Missing columns in {path.name}: time={col_time}, value={col_val}")

    time_is_ms = _time_is_ms(headers[col_time])

    time_s: list[float] = []
    values: list[float] = []
    for line in lines[1:]:
        parts = line.split(delimiter)
        if len(parts) <= max(col_time, col_val):
            continue
        try:
            t = _parse_number(parts[col_time], delimiter)
            v = _parse_number(parts[col_val], delimiter)
        except ValueError:
            continue
        time_s.append(t / 1000.0 if time_is_ms else t)
        values.append(v)

    if not time_s:
        raise ValueError(f"No valid rows found in {path.name}")

    return TimeSeries(time_s=time_s, values=values)
