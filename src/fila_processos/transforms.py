"""Pure helpers for process records: ``dias`` coercion, flattening, number masks.

Key quirks of the upstream snapshot:
  - ``dias`` arrives as a number, a numeric string ("12", "12 dias"), an empty
    string, ``null``, or is missing altogether.
  - ``posição`` keeps its accent in the JSON key; the flattened column is
    ``posicao``.
  - Older snapshots were written as a map keyed by process number instead of
    a list. That shape is only accepted through ``records_from_mapping``.

No I/O here: every function is dict-in / dict-out.
"""

import math
import re

from .config import NUMERO_PATTERN

# Longest leading decimal literal, the way the upstream dashboard parsed it
_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII)
_NUMERO = re.compile(NUMERO_PATTERN, re.ASCII)
_NON_DIGIT = re.compile(r"\D", re.ASCII)


def parse_dias(value) -> float | None:
    """Coerce a raw ``dias`` value to a finite float, or ``None``.

    Numbers are taken as they are, strings by their leading decimal literal
    (``"12 dias"`` → 12.0, ``"3,5"`` → 3.0). Booleans, ``None``, NaN, infinities
    and anything unparseable give ``None``. The sign is kept: use
    ``is_valid_dias`` to apply the ``> 0`` rule.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return None
        try:
            number = float(match.group(1))
        except OverflowError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def is_valid_dias(value) -> bool:
    """True when ``value`` coerces to a finite number strictly greater than zero."""
    number = parse_dias(value)
    return number is not None and number > 0


def _as_text(value) -> str | None:
    return value if isinstance(value, str) else None


def flatten_processo_record(rec: dict) -> dict:
    """Flatten one snapshot record into the columns used by the query layer."""
    processo = rec.get("processo")
    return {
        "processo":    str(processo) if processo is not None else None,
        "unidade":     _as_text(rec.get("unidade")),
        "tipo_tabela": _as_text(rec.get("tipo_tabela")),
        "dias":        parse_dias(rec.get("dias")),
        "posicao":     parse_dias(rec.get("posição", rec.get("posicao"))),
    }


def records_from_mapping(mapping: dict) -> list[dict]:
    """Convert the legacy id-keyed snapshot into the canonical list of records.

    The key fills ``processo`` when the record lacks it. Values that are not
    objects are dropped.
    """
    records: list[dict] = []
    for numero, rec in mapping.items():
        if not isinstance(rec, dict):
            continue
        records.append({"processo": numero, **rec} if "processo" not in rec else dict(rec))
    return records


def format_numero(texto: str) -> str:
    """Mask free-text input as ``NNNN.NNNNNN/NNNN-NN``.

    Non-digits are dropped and at most 16 digits are kept, so partial input
    yields a partial mask:
        format_numero("1234567")              # → "1234.567"
        format_numero("1234567890123456")     # → "1234.567890/1234-56"
    """
    digits = _NON_DIGIT.sub("", texto or "")
    out = digits[:4]
    if len(digits) > 4:
        out += "." + digits[4:10]
    if len(digits) > 10:
        out += "/" + digits[10:14]
    if len(digits) > 14:
        out += "-" + digits[14:16]
    return out


def is_valid_numero(numero: str) -> bool:
    """True when ``numero`` is exactly ``NNNN.NNNNNN/NNNN-NN``."""
    return bool(_NUMERO.fullmatch(numero or ""))
