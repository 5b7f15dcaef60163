from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from zipfile import BadZipFile

import pandas as pd
from openpyxl.styles import Font

from ..core.exceptions import ImportFailed

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class Sheet:
    """First worksheet of an uploaded workbook, headers lower-cased."""

    columns: Tuple[str, ...]
    rows: List[Dict[str, str]]


def read_sheet(source: Union[BinaryIO, bytes]) -> Sheet:
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        df = pd.read_excel(source, sheet_name=0, dtype=str, engine="openpyxl")
    except (ValueError, OSError, KeyError, BadZipFile) as exc:
        raise ImportFailed({"General": [f"Unable to read the workbook: {exc}"]}) from exc

    df.columns = [str(c).strip().lower() for c in df.columns]
    df = df.fillna("")
    rows = [{key: str(value).strip() for key, value in record.items()} for record in df.to_dict(orient="records")]
    return Sheet(columns=tuple(df.columns), rows=rows)


def write_sheet(
    rows: Sequence[Mapping[str, Any]],
    sheet_name: str,
    *,
    columns: Optional[Sequence[str]] = None,
) -> bytes:
    df = pd.DataFrame(list(rows), columns=list(columns) if columns else None)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
        worksheet = writer.sheets[sheet_name]
        for cell in worksheet[1]:
            cell.font = Font(bold=True)
    return output.getvalue()
