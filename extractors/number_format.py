"""
Excel number-format rendering.

Turns a decoded cell value plus its number-format code into the text the
sheet shows. Covers the format classes that appear in practice:

  - General                     → up to 15 significant digits
  - fixed / thousands           → ``0``, ``0.00``, ``#,##0.00``, ``"$"#,##0``
  - percent                     → ``0%``, ``0.00%``
  - date / time                 → ``dd/mm/yyyy``, ``m/d/yy h:mm AM/PM``, ...

Anything else (fractions, scientific, elapsed-time brackets) falls back
to the General rendering rather than guessing.
"""

from __future__ import annotations

import datetime
import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Optional

from openpyxl.styles.numbers import FORMAT_GENERAL, FORMAT_TEXT, is_date_format

# Excel keeps 15 significant digits.
_GENERAL_DIGITS = 15

# Number-format tokens: quoted literals, escapes, [..] modifiers, date parts.
_DATE_TOKEN = re.compile(
    r'"[^"]*"|\\.|\[[^\]]*\]|am/pm|a/p|y+|m+|d+|h+|s+|.',
    re.IGNORECASE,
)
_NUMERIC_CORE = re.compile(r"(?P<int>[#0,]*0[#0,]*|#[#,]*)(?:\.(?P<dec>[0#]+))?")

_MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
]
_DAY_NAMES = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
]


def _sections(fmt: str) -> List[str]:
    return (fmt or FORMAT_GENERAL).split(";")


def _strip_literals(section: str) -> str:
    """Drop colour/locale brackets and padding, unwrap quotes and escapes."""
    section = re.sub(r"\[[^\]]*\]", "", section)
    section = re.sub(r"[_*].", "", section)
    section = re.sub(r'"([^"]*)"', r"\1", section)
    return re.sub(r"\\(.)", r"\1", section)


# ------------------------------------------------------------------
# Numbers
# ------------------------------------------------------------------

def format_general(value: float) -> str:
    if isinstance(value, int):
        return str(value)
    if value.is_integer() and abs(value) < 10 ** _GENERAL_DIGITS:
        return str(int(value))
    return f"{value:.{_GENERAL_DIGITS}g}"


def _format_fixed(value: float, core: re.Match) -> str:
    int_part = core.group("int")
    dec_part = core.group("dec") or ""
    max_dec = len(dec_part)
    min_dec = dec_part.count("0")
    sep = "," if "," in int_part else ""

    rounded = Decimal(str(value)).quantize(Decimal(1).scaleb(-max_dec), rounding=ROUND_HALF_UP)
    text = f"{rounded:{sep}.{max_dec}f}"
    if max_dec > min_dec:
        whole, _, frac = text.partition(".")
        frac = frac.rstrip("0").ljust(min_dec, "0")
        text = f"{whole}.{frac}" if frac else whole
    if text.startswith("0") and "0" not in int_part and int_part:
        # "#.00" shows .5 rather than 0.5
        text = text[1:]
    return text


def format_number(value: float, number_format: str = FORMAT_GENERAL) -> str:
    """Render an int / float with a non-date number format."""
    sections = _sections(number_format)
    section = sections[0]
    negative = value < 0
    if negative and len(sections) > 1 and sections[1]:
        section, value, negative = sections[1], -value, False
    elif value == 0 and len(sections) > 2 and sections[2]:
        section = sections[2]

    cleaned = _strip_literals(section)
    if isinstance(value, float) and not math.isfinite(value):
        return format_general(value)
    if cleaned.strip().lower() in ("", FORMAT_GENERAL.lower(), FORMAT_TEXT):
        return format_general(value)

    core = _NUMERIC_CORE.search(cleaned)
    if core is None or "e+" in cleaned.lower() or "?" in cleaned:
        return format_general(value)

    scaled = abs(value) * 100 if "%" in cleaned else abs(value)
    try:
        body = _format_fixed(scaled, core)
    except InvalidOperation:
        # beyond Decimal's working precision
        return format_general(value)
    text = cleaned[: core.start()] + body + cleaned[core.end():]
    if negative and any(c in "123456789" for c in body):
        return f"-{text}"
    return text


# ------------------------------------------------------------------
# Dates and times
# ------------------------------------------------------------------

def _is_minute(tokens: List[str], idx: int) -> bool:
    """An ``m``/``mm`` token means minutes right after hours or before seconds."""
    for prev in reversed(tokens[:idx]):
        low = prev.lower()
        if low[0] in "ymdhs" and not prev.startswith(("\"", "\\", "[")):
            if low[0] == "h":
                return True
            break
    for nxt in tokens[idx + 1:]:
        low = nxt.lower()
        if low[0] in "ymdhs" and not nxt.startswith(("\"", "\\", "[")):
            return low[0] == "s"
    return False


def _as_datetime(value) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    return datetime.datetime.combine(datetime.date(1899, 12, 31), value)


def format_datetime(value, number_format: str) -> str:
    """Render a date / datetime / time with an Excel date format code."""
    dt = _as_datetime(value)
    tokens = _DATE_TOKEN.findall(_sections(number_format)[0])
    twelve_hour = any(t.lower() in ("am/pm", "a/p") for t in tokens)

    out: List[str] = []
    for idx, tok in enumerate(tokens):
        low = tok.lower()
        if tok.startswith('"'):
            out.append(tok[1:-1])
        elif tok.startswith("\\"):
            out.append(tok[1:])
        elif tok.startswith("["):
            continue
        elif low == "am/pm":
            out.append("AM" if dt.hour < 12 else "PM")
        elif low == "a/p":
            out.append("A" if dt.hour < 12 else "P")
        elif low[0] == "y":
            out.append(f"{dt.year:04d}" if len(low) > 2 else f"{dt.year % 100:02d}")
        elif low[0] == "m":
            if len(low) <= 2 and _is_minute(tokens, idx):
                out.append(f"{dt.minute:0{len(low)}d}")
            elif len(low) <= 2:
                out.append(f"{dt.month:0{len(low)}d}")
            elif len(low) == 3:
                out.append(_MONTH_NAMES[dt.month - 1][:3])
            elif len(low) == 4:
                out.append(_MONTH_NAMES[dt.month - 1])
            else:
                out.append(_MONTH_NAMES[dt.month - 1][0])
        elif low[0] == "d":
            if len(low) <= 2:
                out.append(f"{dt.day:0{len(low)}d}")
            elif len(low) == 3:
                out.append(_DAY_NAMES[dt.weekday()][:3])
            else:
                out.append(_DAY_NAMES[dt.weekday()])
        elif low[0] == "h":
            hour = (dt.hour % 12 or 12) if twelve_hour else dt.hour
            out.append(f"{hour:0{min(len(low), 2)}d}")
        elif low[0] == "s":
            out.append(f"{dt.second:0{min(len(low), 2)}d}")
        elif tok not in ("_", "*", "@"):
            out.append(tok)
    return "".join(out)


def format_iso(value) -> str:
    """Fallback rendering for temporal values without a date format."""
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time(0, 0):
            return value.date().isoformat()
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return value.isoformat()


def format_temporal(value, number_format: Optional[str] = None) -> str:
    if number_format and is_date_format(number_format):
        return format_datetime(value, number_format)
    return format_iso(value)
