"""Writing device profiles into an xlsx template workbook."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import Field, fields
from typing import Any, BinaryIO

from .constants import (
    API_VERSION,
    API_VERSION_HEADER,
    DESCRIPTION,
    DEVICE_COMMAND_SHEET_NAME,
    DEVICE_INFO_SHEET_NAME,
    DEVICE_RESOURCE_SHEET_NAME,
    IS_HIDDEN,
    LABELS,
    MANUFACTURER,
    MAPPING_PATH_SEPARATOR,
    MODEL,
    NAME,
    READ_WRITE,
    RESOURCE_NAME,
    RESOURCE_OPERATION,
)
from .dtos import DeviceProfile, DeviceResource, ResourceOperation, ResourceProperties
from .errors import EdgeXError, ErrorKind
from .workbook import Workbook, column_number_to_name


def _field_named(cls: type, header: str) -> Field | None:
    return next((f for f in fields(cls) if f.metadata.get("header") == header), None)


class DeviceProfileXlsxWriter:
    """Fills the DeviceInfo, DeviceResource and DeviceCommand sheets of a template."""

    def __init__(self, workbook: Workbook, profile: DeviceProfile):
        self.workbook = workbook
        self.profile = profile
        self._closed = False

    def __enter__(self) -> "DeviceProfileXlsxWriter":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise EdgeXError(ErrorKind.SERVER_ERROR, "xlsx file is closed")

    def _set(self, sheet: str, cell: str, value: Any) -> None:
        try:
            self.workbook.set_cell_value(sheet, cell, value)
        except ValueError as exc:
            raise EdgeXError(ErrorKind.SERVER_ERROR,
                             f"failed to set cell value in the '{sheet}' sheet", exc) from exc

    def convert_to_xlsx(self) -> None:
        """Write the whole profile into the template sheets."""
        self._check_open()
        self.convert_device_info()
        if self.profile.device_resources:
            self.convert_device_resources()
        if self.profile.device_commands:
            self.convert_device_command()

    def write(self, stream: BinaryIO) -> None:
        """Save the workbook as xlsx to a binary stream."""
        self._check_open()
        try:
            self.workbook.save(stream)
        except (OSError, ValueError) as exc:
            raise EdgeXError(ErrorKind.SERVER_ERROR, "failed to write xlsx file to io.Writer", exc) from exc

    def close(self) -> None:
        """Release the workbook; the writer cannot be used afterwards."""
        self._closed = True

    def convert_device_info(self) -> None:
        """Fill column B of the DeviceInfo sheet next to each known header."""
        self._check_open()
        try:
            cols = self.workbook.get_cols(DEVICE_INFO_SHEET_NAME)
        except ValueError as exc:
            raise EdgeXError(ErrorKind.SERVER_ERROR,
                             f"failed to retrieve all columns from {DEVICE_INFO_SHEET_NAME} worksheet",
                             exc) from exc
        if not cols:
            raise EdgeXError(ErrorKind.CONTRACT_INVALID,
                             f"no header column defined in {DEVICE_INFO_SHEET_NAME} worksheet")

        profile = self.profile
        values = {
            API_VERSION_HEADER.lower(): lambda: API_VERSION,
            NAME: lambda: profile.name,
            MANUFACTURER: lambda: profile.manufacturer,
            MODEL: lambda: profile.model,
            DESCRIPTION.lower(): lambda: profile.description,
            LABELS: lambda: ", ".join(profile.labels or []),
        }
        for row, header in enumerate(cols[0], start=1):
            getter = values.get(header.lower())
            if getter is not None:
                self._set(DEVICE_INFO_SHEET_NAME, f"B{row}", getter())

    def _resource_cell(self, resource: DeviceResource, header: str) -> Any:
        if _field_named(DeviceResource, header) is not None:
            key = header.lower()
            if key == NAME:
                return resource.name
            if key == DESCRIPTION.lower():
                return resource.description
            if key == IS_HIDDEN.lower():
                return "true" if resource.is_hidden else "false"
            return None

        prop_field = _field_named(ResourceProperties, header)
        if prop_field is not None:
            return getattr(resource.properties, prop_field.name)

        names = header.split(MAPPING_PATH_SEPARATOR)
        attributes = resource.attributes or {}
        if names[0] not in attributes:
            return None
        value = attributes[names[0]]
        for name in names[1:]:
            if not isinstance(value, dict):
                raise EdgeXError(
                    ErrorKind.SERVER_ERROR,
                    f"failed to convert device resource attribute into column '{header}' "
                    f"from {DEVICE_RESOURCE_SHEET_NAME} worksheet")
            value = value.get(name)
        return value

    def convert_device_resources(self) -> None:
        """Write one DeviceResource row per resource under the header row."""
        self._check_open()
        try:
            rows = self.workbook.get_rows(DEVICE_RESOURCE_SHEET_NAME)
        except ValueError as exc:
            raise EdgeXError(ErrorKind.SERVER_ERROR,
                             f"failed to retrieve all rows from {DEVICE_RESOURCE_SHEET_NAME} worksheet",
                             exc) from exc
        if not rows:
            raise EdgeXError(ErrorKind.CONTRACT_INVALID,
                             f"no header row defined in {DEVICE_RESOURCE_SHEET_NAME} worksheet")

        header_row = rows[0]
        for row, resource in enumerate(self.profile.device_resources, start=2):
            for col, header in enumerate(header_row, start=1):
                if header == "":
                    continue
                cell = self._resource_cell(resource, header)
                if cell is None or cell == "":
                    continue
                self._set(DEVICE_RESOURCE_SHEET_NAME, f"{column_number_to_name(col)}{row}", cell)

    def convert_device_command(self) -> None:
        """Write one DeviceCommand column per command next to the header column."""
        self._check_open()
        try:
            cols = self.workbook.get_cols(DEVICE_COMMAND_SHEET_NAME)
        except ValueError as exc:
            raise EdgeXError(ErrorKind.SERVER_ERROR,
                             f"failed to retrieve all cols from {DEVICE_COMMAND_SHEET_NAME} worksheet",
                             exc) from exc
        if not cols:
            raise EdgeXError(ErrorKind.CONTRACT_INVALID,
                             f"no header column defined in {DEVICE_COMMAND_SHEET_NAME} worksheet")

        header_col = cols[0]
        for cmd_index, command in enumerate(self.profile.device_commands):
            column = column_number_to_name(cmd_index + 2)
            cell: Any = None
            for row_index, header in enumerate(header_col):
                if header == "":
                    continue
                key = header.lower()
                if key == NAME:
                    cell = command.name
                elif key == IS_HIDDEN.lower():
                    cell = command.is_hidden
                elif key == READ_WRITE.lower():
                    cell = command.read_write
                elif key == RESOURCE_NAME.lower():
                    pass
                elif key == RESOURCE_OPERATION.lower():
                    self.set_resource_name_cells(row_index, cmd_index, command.resource_operations)
                    break
                else:
                    continue
                self._set(DEVICE_COMMAND_SHEET_NAME, f"{column}{row_index + 1}", cell)

    def set_resource_name_cells(self, start_row: int, col_number: int,
                                resource_operations: list[ResourceOperation]) -> None:
        """Write the resource names of the operations down one DeviceCommand column."""
        self._check_open()
        try:
            column = column_number_to_name(col_number + 2)
        except ValueError as exc:
            raise EdgeXError(ErrorKind.SERVER_ERROR,
                             f"failed to convert column number {col_number + 2} to name all rows "
                             f"from {DEVICE_COMMAND_SHEET_NAME} worksheet", exc) from exc
        for row, operation in enumerate(resource_operations or [], start=start_row + 1):
            self._set(DEVICE_COMMAND_SHEET_NAME, f"{column}{row}", operation.device_resource)


def new_xlsx_writer(data: Any, stream: BinaryIO) -> DeviceProfileXlsxWriter:
    """Open the xlsx template in ``stream`` and return a writer for ``data``."""
    try:
        workbook = Workbook.load(stream)
    except (ValueError, KeyError, OSError, ET.ParseError) as exc:
        raise EdgeXError(ErrorKind.SERVER_ERROR,
                         "failed to open xlsx template file from io.Reader", exc) from exc
    if isinstance(data, DeviceProfile):
        return DeviceProfileXlsxWriter(workbook, data)
    raise EdgeXError(ErrorKind.CONTRACT_INVALID, "unknown DTO type for xlsx writer")


def convert_to_xlsx(stream: BinaryIO, out: BinaryIO, data: Any) -> None:
    """Fill the template read from ``stream`` with ``data`` and write it to ``out``."""
    with new_xlsx_writer(data, stream) as writer:
        writer.convert_to_xlsx()
        writer.write(out)