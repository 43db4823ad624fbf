"""Tests for the pure record helpers: dias coercion, flattening, number masks."""
import math

import pytest

from fila_processos.transforms import (
    flatten_processo_record,
    format_numero,
    is_valid_dias,
    is_valid_numero,
    parse_dias,
    records_from_mapping,
)


@pytest.mark.parametrize("raw, expected", [
    (5, 5.0),
    (2.5, 2.5),
    ("12", 12.0),
    ("  7.25", 7.25),
    ("12 dias", 12.0),
    ("3,5", 3.0),
    (".5", 0.5),
    ("1e2", 100.0),
    ("-4", -4.0),
    (0, 0.0),
])
def test_parse_dias_numbers_and_numeric_strings(raw, expected):
    assert parse_dias(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "dias 12", True, False, [5], {"d": 1},
                                 float("nan"), float("inf"), "Infinity"])
def test_parse_dias_unparseable_gives_none(raw):
    assert parse_dias(raw) is None


def test_parse_dias_overflowing_literal_is_invalid():
    """A literal too large for a float coerces to infinity, which is not finite."""
    assert parse_dias("1e999") is None


@pytest.mark.parametrize("raw, valid", [
    (1, True),
    ("0.1", True),
    (0, False),
    ("0", False),
    (-1, False),
    (None, False),
    ("abc", False),
    (math.inf, False),
])
def test_is_valid_dias_requires_finite_positive(raw, valid):
    assert is_valid_dias(raw) is valid


def test_flatten_processo_record_coerces_and_renames():
    rec = {"processo": "0001.000001/2024-01", "unidade": "COMRAR", "tipo_tabela": "Análise",
           "dias": "15", "posição": "3"}
    assert flatten_processo_record(rec) == {
        "processo":    "0001.000001/2024-01",
        "unidade":     "COMRAR",
        "tipo_tabela": "Análise",
        "dias":        15.0,
        "posicao":     3.0,
    }


def test_flatten_processo_record_missing_fields_are_none():
    flat = flatten_processo_record({})
    assert flat == {"processo": None, "unidade": None, "tipo_tabela": None, "dias": None, "posicao": None}


def test_flatten_processo_record_drops_non_text_labels():
    """Only string labels take part in unit and tabela equality; the number is display only."""
    flat = flatten_processo_record({"processo": 123, "unidade": 7, "tipo_tabela": ["T"]})
    assert flat["processo"] == "123"
    assert flat["unidade"] is None
    assert flat["tipo_tabela"] is None


def test_records_from_mapping_fills_processo_from_key():
    legacy = {
        "0001.000001/2024-01": {"unidade": "COMRAR", "dias": 3},
        "0001.000002/2024-02": {"processo": "0001.000002/2024-02", "unidade": "GEO"},
        "lixo": "não é objeto",
    }
    records = records_from_mapping(legacy)
    assert records == [
        {"processo": "0001.000001/2024-01", "unidade": "COMRAR", "dias": 3},
        {"processo": "0001.000002/2024-02", "unidade": "GEO"},
    ]


@pytest.mark.parametrize("typed, masked", [
    ("", ""),
    ("12", "12"),
    ("1234", "1234"),
    ("12345", "1234.5"),
    ("1234567890", "1234.567890"),
    ("12345678901", "1234.567890/1"),
    ("123456789012345", "1234.567890/1234-5"),
    ("1234567890123456", "1234.567890/1234-56"),
    ("12345678901234567890", "1234.567890/1234-56"),
    ("1234.567890/1234-56", "1234.567890/1234-56"),
    ("ab12cd34.5", "1234.5"),
])
def test_format_numero_masks_progressively(typed, masked):
    assert format_numero(typed) == masked


@pytest.mark.parametrize("numero, valid", [
    ("1234.567890/1234-56", True),
    ("1234.567890/1234-5", False),
    ("1234567890123456", False),
    ("1234.567890/1234-56 ", False),
    ("1234.567890/1234-56\n", False),
    ("", False),
])
def test_is_valid_numero_exact_pattern(numero, valid):
    assert is_valid_numero(numero) is valid
