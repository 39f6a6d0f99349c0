"""Parsing of the MappingTable worksheet."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import DEFAULT_VALUE_COL, MAPPING_TABLE_SHEET_NAME, OBJECT_COL, PATH_COL
from .errors import EdgeXError, ErrorKind
from .workbook import Workbook


@dataclass(frozen=True)
class MappingField:
    """Default value and path of one object in the MappingTable sheet."""

    default_value: str = ""
    path: str = ""


def convert_mapping_table(workbook: Workbook) -> dict[str, MappingField]:
    """Read the MappingTable sheet into a map from object name to its mapping."""
    try:
        rows = workbook.get_rows(MAPPING_TABLE_SHEET_NAME)
    except ValueError as exc:
        raise EdgeXError(ErrorKind.SERVER_ERROR,
                         f"failed to retrieve all rows from {MAPPING_TABLE_SHEET_NAME}", exc) from exc
    if len(rows) < 2:
        raise EdgeXError(ErrorKind.CONTRACT_INVALID,
                         "at least 2 rows needs to be defined in the MappingTable sheet (1 header and 1 data row)")

    header, *data = rows
    columns = {}
    for index, cell in enumerate(header):
        key = cell.lower()
        if key in (OBJECT_COL, PATH_COL, DEFAULT_VALUE_COL):
            columns[key] = index
    if len(columns) != 3:
        raise EdgeXError(
            ErrorKind.CONTRACT_INVALID,
            f"column Object, Path, or Default Value not defined in the header of {MAPPING_TABLE_SHEET_NAME} worksheet")

    width = max(len(header), *(i + 1 for i in columns.values()))
    result: dict[str, MappingField] = {}
    for row in data:
        padded = row + [""] * (width - len(row))
        result[padded[columns[OBJECT_COL]]] = MappingField(
            default_value=padded[columns[DEFAULT_VALUE_COL]], path=padded[columns[PATH_COL]])
    return result