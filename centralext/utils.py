"""Helpers shared by the xlsx readers and writers."""

from __future__ import annotations

import math
import re
from dataclasses import fields
from typing import Any

from .constants import BOOL_STRINGS
from .errors import EdgeXError, ErrorKind
from .workbook import Workbook, column_number_to_name

_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_RE = re.compile(
    r"^[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)$",
    re.IGNORECASE,
)


def check_mapping_object(workbook: Workbook, sheet_name: str, total_col_count: int,
                         total_row_count: int, default_value: str, object_field: str,
                         header: list[str] | None) -> int:
    """Add a column for a mapped object missing from the sheet header.

    The new column holds ``object_field`` as header and ``default_value`` in
    every other row; ``header`` is extended in place. Returns the new column count.
    """
    if header is None:
        raise EdgeXError(ErrorKind.CONTRACT_INVALID, "header cannot be nil")
    if object_field in header or default_value == "":
        return total_col_count
    try:
        col_name = column_number_to_name(total_col_count + 1)
    except ValueError as exc:
        raise EdgeXError(ErrorKind.SERVER_ERROR, "failed to covert column number to name", exc) from exc
    try:
        workbook.insert_cols(sheet_name, col_name, 1)
    except ValueError as exc:
        raise EdgeXError(ErrorKind.SERVER_ERROR, f"failed to insert empty column to {sheet_name}", exc) from exc
    values = [object_field if i == 0 else default_value for i in range(total_row_count)]
    try:
        workbook.set_sheet_col(sheet_name, col_name + "1", values)
    except ValueError as exc:
        raise EdgeXError(ErrorKind.SERVER_ERROR,
                         f"failed to set new column to {col_name} in {sheet_name}", exc) from exc
    header.append(object_field)
    return total_col_count + 1


def check_required_sheets(all_sheet_names: list[str], required_sheets: list[str]) -> None:
    """Raise if any required sheet is missing."""
    for required in required_sheets:
        if required not in all_sheet_names:
            raise EdgeXError(ErrorKind.CONTRACT_INVALID, f"{required} worksheet not found in the file")


def set_map_to_struct_field(obj: Any, field_name: str, map_value: dict[str, Any]) -> None:
    """Set the map-typed field whose header is ``field_name`` on a DTO."""
    for f in fields(obj):
        if f.metadata.get("header") == field_name:
            if f.metadata.get("kind") != "map":
                raise EdgeXError(ErrorKind.SERVER_ERROR,
                                 f"failed to set map to non-map '{field_name}' field in struct")
            setattr(obj, f.name, map_value)
            return
    raise EdgeXError(ErrorKind.SERVER_ERROR, f"failed to find {field_name} field in struct")


def parse_string_to_actual_type(value: str) -> Any:
    """Return ``value`` as int, float or bool when it parses as one, else unchanged."""
    if _INT_RE.match(value):
        number = int(value)
        if -(2 ** 63) <= number < 2 ** 63:
            return number
    if _FLOAT_RE.match(value):
        result = float(value)
        if not math.isinf(result) or "inf" in value.lower():
            return result
    if value in BOOL_STRINGS:
        return BOOL_STRINGS[value]
    return value