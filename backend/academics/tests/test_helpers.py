from datetime import date, datetime

import pandas as pd

from academics.ingest.helpers import clean_cell, clean_workbook_cell, parse_excel_date, parse_float_cell, parse_int_cell


def test_clean_cell_sentinels():
    assert clean_cell(None) is None
    assert clean_cell("  ") is None
    assert clean_cell(float("nan")) is None
    assert clean_cell(pd.NaT) is None
    assert clean_cell("  CE ") == "CE"
    assert clean_cell(7) == "7"


def test_text_that_spells_a_missing_value_is_kept():
    assert clean_cell("Nat") == "Nat"
    assert clean_cell("None") == "None"
    assert clean_cell("null") == "null"


def test_workbook_cells_drop_pandas_missing_text():
    assert clean_workbook_cell("nan") is None
    assert clean_workbook_cell(" NaT ") is None
    assert clean_workbook_cell("<NA>") is None
    assert clean_workbook_cell("Nat") == "Nat"


def test_parse_int_cell():
    assert parse_int_cell("4") == 4
    assert parse_int_cell("4.0") == 4
    assert parse_int_cell("") == 0
    assert parse_int_cell("x") == 0
    assert parse_int_cell("x", 1) == 1
    assert parse_int_cell(None, None) is None


def test_parse_float_cell():
    assert parse_float_cell("8.25") == 8.25
    assert parse_float_cell("") == 0.0
    assert parse_float_cell("inf") == 0.0
    assert parse_float_cell("n/a") == 0.0


def test_parse_excel_date_formats():
    assert parse_excel_date("2024-05-31") == date(2024, 5, 31)
    assert parse_excel_date("31/05/2024") == date(2024, 5, 31)
    assert parse_excel_date("2024-05-31 00:00:00") == date(2024, 5, 31)
    assert parse_excel_date(datetime(2024, 5, 31, 10, 0)) == date(2024, 5, 31)
    assert parse_excel_date(pd.Timestamp("2024-05-31")) == date(2024, 5, 31)
    assert parse_excel_date(45443) == date(2024, 5, 31)
    assert parse_excel_date("not a date") is None
    assert parse_excel_date("") is None
