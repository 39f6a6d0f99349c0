"""Sheet names, column headers and other fixed strings of the xlsx templates."""

API_VERSION = "v3"
COMMA_SEPARATOR = ","

# worksheet names
DEVICES_SHEET_NAME = "Devices"
AUTO_EVENTS_SHEET_NAME = "AutoEvents"
MAPPING_TABLE_SHEET_NAME = "MappingTable"
DEVICE_INFO_SHEET_NAME = "DeviceInfo"
DEVICE_RESOURCE_SHEET_NAME = "DeviceResource"
DEVICE_COMMAND_SHEET_NAME = "DeviceCommand"

# MappingTable header columns (compared in lower case)
OBJECT_COL = "object"
PATH_COL = "path"
DEFAULT_VALUE_COL = "default value"
MAPPING_PATH_SEPARATOR = "."

# lower-case common names
NAME = "name"
MANUFACTURER = "manufacturer"
MODEL = "model"
LABELS = "labels"
VALUE_TYPE = "valueType"
OFFSET = "offset"
RESOURCE_NAME = "resourceName"

# DTO field names used as headers
API_VERSION_HEADER = "ApiVersion"
DESCRIPTION = "Description"
IS_HIDDEN = "IsHidden"
PROPERTIES = "Properties"
READ_WRITE = "ReadWrite"
UNITS = "Units"
MINIMUM = "Minimum"
MAXIMUM = "Maximum"
DEFAULT_VALUE = "DefaultValue"
MASK = "Mask"
SHIFT = "Shift"
SCALE = "Scale"
BASE = "Base"
ASSERTION = "Assertion"
MEDIA_TYPE = "MediaType"
RESOURCE_OPERATION = "ResourceOperation"
RESOURCE_OPERATIONS = "ResourceOperations"
PROTOCOLS = "Protocols"
TAGS = "Tags"
ATTRIBUTES = "Attributes"

# strings accepted as booleans
BOOL_STRINGS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}