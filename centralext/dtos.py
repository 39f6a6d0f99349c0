"""Data transfer objects for device profiles and devices.

Every field carries metadata: ``header`` is the column name it is matched
against in a worksheet and ``kind`` says how a cell is converted into it
("str", "list", "bool", "int", "any", "map" or "other").
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _f(header: str, kind: str, default: Any = None, factory: Any = None) -> Any:
    meta = {"header": header, "kind": kind}
    if factory is not None:
        return field(default_factory=factory, metadata=meta)
    return field(default=default, metadata=meta)


@dataclass
class ResourceProperties:
    value_type: str = _f("ValueType", "str", "")
    read_write: str = _f("ReadWrite", "str", "")
    units: str = _f("Units", "str", "")
    minimum: float | None = _f("Minimum", "other")
    maximum: float | None = _f("Maximum", "other")
    default_value: str = _f("DefaultValue", "str", "")
    mask: int | None = _f("Mask", "other")
    shift: int | None = _f("Shift", "other")
    scale: float | None = _f("Scale", "other")
    offset: float | None = _f("Offset", "other")
    base: float | None = _f("Base", "other")
    assertion: str = _f("Assertion", "str", "")
    media_type: str = _f("MediaType", "str", "")


@dataclass
class DeviceResource:
    description: str = _f("Description", "str", "")
    name: str = _f("Name", "str", "")
    is_hidden: bool = _f("IsHidden", "bool", False)
    properties: ResourceProperties = _f("Properties", "other", factory=ResourceProperties)
    attributes: dict[str, Any] = _f("Attributes", "map", factory=dict)
    tags: dict[str, Any] = _f("Tags", "map", factory=dict)


@dataclass
class ResourceOperation:
    device_resource: str = _f("DeviceResource", "str", "")
    default_value: str = _f("DefaultValue", "str", "")
    mappings: dict[str, str] = _f("Mappings", "map", factory=dict)


@dataclass
class DeviceCommand:
    name: str = _f("Name", "str", "")
    is_hidden: bool = _f("IsHidden", "bool", False)
    read_write: str = _f("ReadWrite", "str", "")
    resource_operations: list[ResourceOperation] = _f("ResourceOperations", "other", factory=list)
    tags: dict[str, Any] = _f("Tags", "map", factory=dict)


@dataclass
class DeviceProfile:
    id: str = _f("Id", "str", "")
    name: str = _f("Name", "str", "")
    manufacturer: str = _f("Manufacturer", "str", "")
    description: str = _f("Description", "str", "")
    model: str = _f("Model", "str", "")
    labels: list[str] = _f("Labels", "list", factory=list)
    device_resources: list[DeviceResource] = _f("DeviceResources", "other", factory=list)
    device_commands: list[DeviceCommand] = _f("DeviceCommands", "other", factory=list)


@dataclass
class AutoEvent:
    interval: str = _f("Interval", "str", "")
    on_change: bool = _f("OnChange", "bool", False)
    source_name: str = _f("SourceName", "str", "")


@dataclass
class Device:
    id: str = _f("Id", "str", "")
    name: str = _f("Name", "str", "")
    parent: str = _f("Parent", "str", "")
    description: str = _f("Description", "str", "")
    admin_state: str = _f("AdminState", "str", "")
    operating_state: str = _f("OperatingState", "str", "")
    labels: list[str] = _f("Labels", "list", factory=list)
    location: Any = _f("Location", "any")
    service_name: str = _f("ServiceName", "str", "")
    profile_name: str = _f("ProfileName", "str", "")
    auto_events: list[AutoEvent] = _f("AutoEvents", "other", factory=list)
    protocols: dict[str, dict[str, Any]] = _f("Protocols", "map", factory=dict)
    tags: dict[str, Any] = _f("Tags", "map", factory=dict)
    properties: dict[str, Any] = _f("Properties", "map", factory=dict)