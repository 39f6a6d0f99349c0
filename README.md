# centralext

Tools for moving device data between `.xlsx` spreadsheets and data objects.
The package also has a small HTTP client for a system management service.

The package has no runtime dependencies. Workbooks are read and written with
the standard library alone.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `centralext.dtos`: dataclasses `DeviceProfile`, `DeviceResource`,
  `ResourceProperties`, `DeviceCommand`, `ResourceOperation`, `Device` and
  `AutoEvent`. The metadata on each field gives the worksheet header that
  matches it.
- `centralext.workbook`: `Workbook`, an in-memory workbook that holds cell
  values. It has `load`, `save`, `sheet_names`, `new_sheet`, `get_rows`,
  `get_cols`, `get_cell_value`, `set_cell_value`, `set_sheet_row`,
  `set_sheet_col` and `insert_cols`. The module also has the helpers
  `column_number_to_name` and `split_cell_name`.
- `centralext.mapping`: `convert_mapping_table` reads the `MappingTable`
  sheet into a dict of `MappingField` (`default_value`, `path`) keyed by
  object name.
- `centralext.reader`: `read_struct` and the per-type converters
  `convert_device_fields`, `convert_auto_event_fields`,
  `convert_device_command_fields`, `convert_resources_fields` and
  `convert_dto_std_type_fields`.
- `centralext.utils`: `check_mapping_object`, `check_required_sheets`,
  `set_map_to_struct_field` and `parse_string_to_actual_type`.
- `centralext.writer`: `DeviceProfileXlsxWriter`, `new_xlsx_writer` and
  `convert_to_xlsx`.
- `centralext.system_client`: `SystemManagementClient`.
- `centralext.errors`: `EdgeXError` and `ErrorKind`.

## Writing a device profile to a template

```python
from centralext.dtos import DeviceProfile, DeviceResource, ResourceProperties
from centralext.writer import convert_to_xlsx

profile = DeviceProfile(
    name="sensor-profile",
    manufacturer="Acme",
    device_resources=[
        DeviceResource(
            name="temperature",
            properties=ResourceProperties(value_type="Float32", read_write="R"),
        )
    ],
)

with open("template.xlsx", "rb") as template, open("profile.xlsx", "wb") as out:
    convert_to_xlsx(template, out, profile)
```

The template's sheets are filled in as follows:

- `DeviceInfo`: column B is set next to each known header in column A.
- `DeviceResource`: one row per resource goes under the header row.
- `DeviceCommand`: one column per command goes next to the header column.

For finer control, use `new_xlsx_writer(profile, stream)` to get a
`DeviceProfileXlsxWriter`. Then call `convert_to_xlsx()` and `write(stream)`
on it yourself. The writer is a context manager, and `close()` is called when
the `with` block ends.

## Reading rows into objects

```python
from centralext.workbook import Workbook
from centralext.mapping import convert_mapping_table
from centralext.dtos import Device
from centralext.reader import read_struct

with open("devices.xlsx", "rb") as fh:
    book = Workbook.load(fh)

mappings = convert_mapping_table(book)
header, *rows = book.get_rows("Devices")
for row in rows:
    device = Device()
    read_struct(device, header, row, mappings)
    print(device.name, device.protocols)
```

When a cell is empty, it takes the `Default Value` from the mapping table if
one is set.

For a `Device`, a column that matches no field is placed by the prefix of its
mapping `Path`:

| Path prefix  | Target                      |
|--------------|-----------------------------|
| `protocols`  | nested protocol properties  |
| `properties` | the `properties` map        |
| `tags`       | the `tags` map              |

For a `DeviceResource`, a column that matches neither a resource field nor a
property field becomes an attribute. That happens when the column has no
mapping, or when its mapping path mentions attributes. A header such as
`dataTypeId.identifier` becomes a nested dictionary. Values that parse as
integers, floats or booleans are stored with that type.

For an `AutoEvent`, `read_struct` returns the reference device names found in
the row.

## System management client

```python
from centralext.system_client import SystemManagementClient

client = SystemManagementClient("http://localhost:59890", None)
health = client.get_health(["core-data", "core-metadata"])
config = client.get_config(["core-data"])
results = client.do_operation([{"serviceName": "core-data", "action": "restart"}])
```

The responses are the decoded JSON bodies. An empty body gives `[]`.

The second argument can be any object with an
`add_authentication_data(request)` method. That method is called on each
`urllib.request.Request` before it is sent.

## Errors

Failures raise `centralext.errors.EdgeXError`. Its `kind` is an `ErrorKind`
that tells a server-side fault apart from an invalid contract or input. Its
`cause` holds the underlying exception, if there is one.

## What the package does not do

- There is no single call that turns a whole devices workbook, or a whole
  profile workbook, into a list of devices or a complete profile. You read
  sheets and rows yourself and convert them with `read_struct`.
- The writer only handles device profiles. Passing a list of devices to
  `new_xlsx_writer` raises `EdgeXError`.
- `Workbook` keeps cell values only. Styles and other workbook parts are not
  kept when a file is loaded and saved again.
- There is no command-line tool.