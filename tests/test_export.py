"""Tests for the spreadsheet export."""

import io

import pandas as pd

from unifiedapi.services.export_service import (
    EXPORT_COLUMNS,
    SHEET_NAME,
    guest_to_row,
    guests_to_frame,
    guests_to_xlsx,
)

from .helpers import make_guest


def test_row_formatting():
    guest = make_guest(3, 20, "Carla", "Diaz", group_id_list=[30, 31], classification=None)
    row = guest_to_row(guest)
    assert row["Guest ID"] == 3
    assert row["Linked Groups"] == "30, 31"
    assert row["Second Name"] == ""
    assert row["Classification"] == ""
    assert row["Hotel"] == "No"
    assert list(row) == list(EXPORT_COLUMNS)


def test_empty_frame_keeps_header():
    df = guests_to_frame([])
    assert df.empty
    assert list(df.columns) == list(EXPORT_COLUMNS)


def test_workbook_round_trip_preserves_order():
    guests = [make_guest(2, 10, "Luis", "Lopez"), make_guest(1, 10, "Ana", "Lopez", second_name="Maria")]
    content = guests_to_xlsx(guests)

    df = pd.read_excel(io.BytesIO(content), sheet_name=SHEET_NAME, engine="openpyxl")
    assert list(df["Guest ID"]) == [2, 1]
    assert list(df["First Name"]) == ["Luis", "Ana"]
    assert df.loc[1, "Second Name"] == "Maria"
