"""Spreadsheet export of the guest directory."""

from __future__ import annotations

import io
from typing import Any, Sequence

import pandas as pd

from unifiedapi.domain.guests import Guest

SHEET_NAME = "Guest List"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

EXPORT_COLUMNS = (
    "Guest ID",
    "Group ID",
    "Linked Groups",
    "First Name",
    "Second Name",
    "Last Name",
    "Classification",
    "Status",
    "Special Message",
    "Allergy Comment",
    "Song Recommendation",
    "Hotel",
    "Updated By",
)


def guest_to_row(guest: Guest) -> dict[str, Any]:
    return {
        "Guest ID": guest.id,
        "Group ID": guest.group_id,
        "Linked Groups": ", ".join(str(g) for g in guest.group_id_list),
        "First Name": guest.first_name,
        "Second Name": guest.second_name or "",
        "Last Name": guest.last_name,
        "Classification": guest.classification or "",
        "Status": guest.status,
        "Special Message": guest.special_message or "",
        "Allergy Comment": guest.allergy_comment or "",
        "Song Recommendation": guest.song_recommendation or "",
        "Hotel": "Yes" if guest.hotel else "No",
        "Updated By": guest.updated_by or "",
    }


def guests_to_frame(guests: Sequence[Guest]) -> pd.DataFrame:
    """One row per guest, in the order given. Empty input keeps the header."""
    return pd.DataFrame([guest_to_row(g) for g in guests], columns=list(EXPORT_COLUMNS))


def guests_to_xlsx(guests: Sequence[Guest]) -> bytes:
    df = guests_to_frame(guests)

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)

    return buffer.getvalue()
