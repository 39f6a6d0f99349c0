"""Conversion of worksheet rows into device and device profile DTOs."""

from __future__ import annotations

import re
from dataclasses import Field, fields, is_dataclass
from typing import Any

from .constants import (
    ATTRIBUTES,
    BOOL_STRINGS,
    COMMA_SEPARATOR,
    MAPPING_PATH_SEPARATOR,
    PROPERTIES,
    PROTOCOLS,
    TAGS,
)
from .dtos import AutoEvent, Device, DeviceCommand, DeviceProfile, DeviceResource, ResourceOperation
from .errors import EdgeXError, ErrorKind
from .mapping import MappingField
from .utils import parse_string_to_actual_type, set_map_to_struct_field

_INT_RE = re.compile(r"^[+-]?[0-9]+$")


def _field_by_header(obj: Any, header: str) -> Field | None:
    for f in fields(obj):
        if f.metadata.get("header") == header:
            return f
    return None


def _parse_bool(value: str) -> bool:
    try:
        return BOOL_STRINGS[value]
    except KeyError:
        raise ValueError(f"invalid syntax for a boolean: {value!r}") from None


def _parse_int64(value: str) -> int:
    if not _INT_RE.match(value):
        raise ValueError(f"invalid syntax for an integer: {value!r}")
    number = int(value)
    if not -(2 ** 63) <= number < 2 ** 63:
        raise ValueError(f"value out of range: {value!r}")
    return number


def _set_field(obj: Any, field: Field, origin_value: str) -> None:
    kind = field.metadata.get("kind")
    if kind in ("str", "any"):
        value: Any = origin_value
    elif kind == "list":
        value = origin_value.split(COMMA_SEPARATOR)
    elif kind == "bool":
        try:
            value = _parse_bool(origin_value)
        except ValueError as exc:
            raise EdgeXError(ErrorKind.CONTRACT_INVALID,
                             f"failed to parse originValue '{origin_value}' to bool type", exc) from exc
    elif kind == "int":
        try:
            value = _parse_int64(origin_value)
        except ValueError as exc:
            raise EdgeXError(ErrorKind.CONTRACT_INVALID,
                             f"failed to parse originValue '{origin_value}' to Int64 type", exc) from exc
    else:
        raise EdgeXError(ErrorKind.CONTRACT_INVALID,
                         f"failed to parse originValue '{origin_value}' to {field.type} type")
    setattr(obj, field.name, value)


def _default_if_empty(value: str, header: str, field_mappings: dict[str, MappingField] | None) -> str:
    if value == "" and field_mappings:
        mapping = field_mappings.get(header)
        if mapping is not None and mapping.default_value != "":
            return mapping.default_value
    return value


def read_struct(obj: Any, header_col: list[str], row: list[str],
                mapping_table: dict[str, MappingField] | None) -> Any:
    """Fill the DTO ``obj`` from one worksheet row.

    All fields of ``obj`` are replaced by those converted from the row. For an
    AutoEvent the reference device names are returned; otherwise None.
    """
    if not is_dataclass(obj) or isinstance(obj, type):
        raise EdgeXError(ErrorKind.SERVER_ERROR, "the obj argument should be a DTO instance")

    element = type(obj)()
    extra: Any = None
    if isinstance(element, DeviceProfile):
        convert_dto_std_type_fields(element, row, header_col, mapping_table)
    elif isinstance(element, AutoEvent):
        extra = convert_auto_event_fields(element, row, header_col, mapping_table)
    elif isinstance(element, Device):
        convert_device_fields(element, row, header_col, mapping_table)
    elif isinstance(element, DeviceCommand):
        convert_device_command_fields(element, row, header_col)
    elif isinstance(element, DeviceResource):
        convert_resources_fields(element, row, header_col, mapping_table)
    else:
        raise EdgeXError(ErrorKind.SERVER_ERROR, f"unknown converted DTO type '{type(obj).__name__}'")

    for f in fields(obj):
        setattr(obj, f.name, getattr(element, f.name))
    return extra


def get_struct_field_by_header(obj: Any, col_index: int, header_col: list[str]) -> tuple[str, Field | None]:
    """Return the trimmed header of a column and the DTO field it names, if any.

    Columns beyond the header use the last header cell.
    """
    if not header_col:
        raise EdgeXError(ErrorKind.CONTRACT_INVALID, "header is empty")
    header = header_col[min(col_index, len(header_col) - 1)].strip()
    return header, _field_by_header(obj, header)


def set_std_field_value(obj: Any, field_name: str, origin_value: str) -> None:
    """Convert a cell value into the field named ``field_name`` (header or attribute name)."""
    field = _field_by_header(obj, field_name)
    if field is None:
        field = next((f for f in fields(obj) if f.name == field_name), None)
    if field is None:
        raise EdgeXError(ErrorKind.SERVER_ERROR, f"failed to find {field_name} field in struct")
    _set_field(obj, field, origin_value)


def convert_dto_std_type_fields(obj: Any, row: list[str], header_col: list[str],
                                field_mappings: dict[str, MappingField] | None) -> None:
    """Set the plain-typed fields of a DTO from the row cells whose header names them."""
    for col_index, cell in enumerate(row):
        header, field = get_struct_field_by_header(obj, col_index, header_col)
        if field is None:
            continue
        value = _default_if_empty(cell.strip(), header, field_mappings)
        try:
            _set_field(obj, field, value)
        except EdgeXError as exc:
            raise EdgeXError(ErrorKind.CONTRACT_INVALID, f"error occurred on '{header}' column", exc) from exc


def _set_protocol_property(device: Device, field_name: str, value: Any, path: str) -> None:
    names = field_name.split(MAPPING_PATH_SEPARATOR)
    if len(names) < 2:
        raise EdgeXError(ErrorKind.SERVER_ERROR,
                         f"path '{path}' does not name both a protocol and a property")
    if device.protocols is None:
        device.protocols = {}
    *parents, last = names
    inner = device.protocols.setdefault(parents[0], {})
    for name in parents[1:]:
        inner = inner.setdefault(name, {})
        if not isinstance(inner, dict):
            raise EdgeXError(ErrorKind.SERVER_ERROR,
                             f"failed to convert property '{name}' from '{path}' path to ProtocolProperties type")
    inner[last] = value


def convert_device_fields(device: Device, row: list[str], header_col: list[str],
                          field_mappings: dict[str, MappingField] | None) -> None:
    """Fill a Device from a row, routing unknown columns by their MappingTable path."""
    if field_mappings is None:
        raise EdgeXError(ErrorKind.SERVER_ERROR, "fieldMappings not defined while converting device fields")

    properties: dict[str, Any] = {}
    tags: dict[str, Any] = {}
    for col_index, cell in enumerate(row):
        header, field = get_struct_field_by_header(device, col_index, header_col)
        value = _default_if_empty(cell.strip(), header, field_mappings)

        if field is not None:
            try:
                _set_field(device, field, value)
            except EdgeXError as exc:
                raise EdgeXError(ErrorKind.CONTRACT_INVALID, f"error occurred on '{header}' column", exc) from exc
            continue

        if value == "":
            continue
        mapping = field_mappings.get(header)
        if mapping is None or mapping.path == "":
            continue
        prefix, sep, rest = mapping.path.partition(MAPPING_PATH_SEPARATOR)
        prefix = prefix.strip()
        field_name = rest.strip() if sep else header
        converted = parse_string_to_actual_type(value)

        if prefix == PROTOCOLS.lower():
            _set_protocol_property(device, field_name, converted, mapping.path)
        elif prefix == PROPERTIES.lower():
            properties[field_name] = converted
        elif prefix == TAGS.lower():
            tags[header] = converted

    if properties:
        set_map_to_struct_field(device, PROPERTIES, properties)
    if tags:
        set_map_to_struct_field(device, TAGS, tags)


def convert_auto_event_fields(auto_event: AutoEvent, row: list[str], header_col: list[str],
                              field_mappings: dict[str, MappingField] | None) -> list[str]:
    """Fill an AutoEvent from a row and return the referenced device names."""
    if field_mappings is None:
        raise EdgeXError(ErrorKind.CONTRACT_INVALID, "fieldMappings not defined while converting AutoEvent fields")

    device_names: list[str] = []
    for col_index, cell in enumerate(row):
        header, field = get_struct_field_by_header(auto_event, col_index, header_col)
        value = _default_if_empty(cell.strip(), header, field_mappings)
        if field is not None:
            try:
                _set_field(auto_event, field, value)
            except EdgeXError as exc:
                raise EdgeXError(ErrorKind.CONTRACT_INVALID, f"error occurred on '{header}' column", exc) from exc
        elif value != "":
            device_names.append(value)
    return device_names


def convert_device_command_fields(command: DeviceCommand, row: list[str], header_col: list[str]) -> None:
    """Fill a DeviceCommand; cells under unknown headers become resource operations."""
    operations: list[ResourceOperation] = []
    for col_index, cell in enumerate(row):
        if cell == "":
            continue
        header, field = get_struct_field_by_header(command, col_index, header_col)
        value = cell.strip()
        if field is not None:
            try:
                _set_field(command, field, value)
            except EdgeXError as exc:
                raise EdgeXError(ErrorKind.CONTRACT_INVALID, f"error occurred on '{header}' row", exc) from exc
        else:
            operations.append(ResourceOperation(device_resource=value))
    if operations:
        command.resource_operations = operations


def convert_resources_fields(resource: DeviceResource, row: list[str], header_col: list[str],
                             field_mappings: dict[str, MappingField] | None) -> None:
    """Fill a DeviceResource; unknown columns become (possibly nested) attributes."""
    if field_mappings is None:
        raise EdgeXError(ErrorKind.SERVER_ERROR, "fieldMappings not defined while converting DeviceResource fields")

    for col_index, cell in enumerate(row):
        header, field = get_struct_field_by_header(resource, col_index, header_col)
        value = _default_if_empty(cell.strip(), header, field_mappings)

        if field is not None:
            target, target_field = resource, field
        else:
            target, target_field = resource.properties, _field_by_header(resource.properties, header)
        if target_field is not None:
            try:
                _set_field(target, target_field, value)
            except EdgeXError as exc:
                raise EdgeXError(ErrorKind.CONTRACT_INVALID, f"error occurred on '{header}' column", exc) from exc
            continue

        if value == "":
            continue
        mapping = field_mappings.get(header)
        if mapping is not None and ATTRIBUTES.lower() not in mapping.path.lower():
            continue

        if resource.attributes is None:
            resource.attributes = {}
        converted = parse_string_to_actual_type(value)
        *parents, last = header.split(MAPPING_PATH_SEPARATOR)
        current = resource.attributes
        for name in parents:
            current = current.setdefault(name, {})
            if not isinstance(current, dict):
                raise EdgeXError(ErrorKind.CONTRACT_INVALID,
                                 f"error occurred while converting the nested attribute of '{header}' column")
        current[last] = converted