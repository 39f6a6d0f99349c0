import io

import pytest

from centralext.constants import (
    DEVICE_COMMAND_SHEET_NAME,
    DEVICE_INFO_SHEET_NAME,
    DEVICE_RESOURCE_SHEET_NAME,
    MAPPING_TABLE_SHEET_NAME,
)
from centralext.dtos import (
    DeviceCommand,
    DeviceProfile,
    DeviceResource,
    ResourceOperation,
    ResourceProperties,
)
from centralext.errors import EdgeXError, ErrorKind
from centralext.workbook import Workbook
from centralext.writer import DeviceProfileXlsxWriter, convert_to_xlsx, new_xlsx_writer

MOCK_PROFILE_NAME = "test"
RESOURCE_HEADER = ["Name", "IsHidden", "Description", "ValueType", "ReadWrite", "primaryTable",
                   "Minimum", "dataTypeId.identifier"]


def _base_workbook(sheets):
    wb = Workbook()
    for name in sheets:
        wb.new_sheet(name)
    wb.set_sheet_row(MAPPING_TABLE_SHEET_NAME, "A1", ["Object", "Path", "Default Value"])
    wb.set_sheet_row(MAPPING_TABLE_SHEET_NAME, "A2", ["AdminState", "", "UNLOCKED"])
    return wb


def _template_workbook():
    wb = _base_workbook([MAPPING_TABLE_SHEET_NAME, DEVICE_INFO_SHEET_NAME,
                         DEVICE_RESOURCE_SHEET_NAME, DEVICE_COMMAND_SHEET_NAME])
    wb.set_sheet_row(DEVICE_INFO_SHEET_NAME, "A1", ["Name"])
    wb.set_sheet_row(DEVICE_RESOURCE_SHEET_NAME, "A1", RESOURCE_HEADER)
    wb.set_sheet_row(DEVICE_COMMAND_SHEET_NAME, "A1", ["Name"])
    return wb


def _to_stream(wb):
    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer


def _profile(**kwargs):
    return DeviceProfile(name=MOCK_PROFILE_NAME, **kwargs)


def test_new_xlsx_writer_holds_profile():
    writer = new_xlsx_writer(_profile(), _to_stream(_template_workbook()))
    assert isinstance(writer, DeviceProfileXlsxWriter)
    assert writer.profile.name == MOCK_PROFILE_NAME


def test_new_xlsx_writer_rejects_unknown_type():
    with pytest.raises(EdgeXError) as info:
        new_xlsx_writer("not a dto", _to_stream(_template_workbook()))
    assert info.value.kind is ErrorKind.CONTRACT_INVALID


def test_new_xlsx_writer_rejects_invalid_stream():
    with pytest.raises(EdgeXError) as info:
        new_xlsx_writer(_profile(), io.BytesIO(b"not an xlsx file"))
    assert info.value.kind is ErrorKind.SERVER_ERROR


def test_writer_convert_to_xlsx_sets_name():
    writer = new_xlsx_writer(_profile(), _to_stream(_template_workbook()))
    writer.convert_to_xlsx()
    assert writer.workbook.get_cell_value(DEVICE_INFO_SHEET_NAME, "B1") == MOCK_PROFILE_NAME


def test_write_round_trips():
    writer = new_xlsx_writer(_profile(), _to_stream(_template_workbook()))
    writer.convert_to_xlsx()
    out = io.BytesIO()
    writer.write(out)
    out.seek(0)
    reloaded = Workbook.load(out)
    assert reloaded.get_cell_value(DEVICE_INFO_SHEET_NAME, "B1") == MOCK_PROFILE_NAME
    assert reloaded.get_cell_value(DEVICE_INFO_SHEET_NAME, "A1") == "Name"


def test_close_blocks_further_use():
    writer = new_xlsx_writer(_profile(), _to_stream(_template_workbook()))
    writer.close()
    with pytest.raises(EdgeXError) as info:
        writer.write(io.BytesIO())
    assert info.value.kind is ErrorKind.SERVER_ERROR


def test_context_manager_closes():
    with new_xlsx_writer(_profile(), _to_stream(_template_workbook())) as writer:
        writer.convert_device_info()
    with pytest.raises(EdgeXError):
        writer.convert_device_info()


def test_convert_device_info_name():
    writer = new_xlsx_writer(_profile(), _to_stream(_template_workbook()))
    writer.convert_device_info()
    assert writer.workbook.get_cell_value(DEVICE_INFO_SHEET_NAME, "B1") == MOCK_PROFILE_NAME


def test_convert_device_info_all_headers():
    wb = _template_workbook()
    wb.set_sheet_col(DEVICE_INFO_SHEET_NAME, "A1",
                     ["Name", "Manufacturer", "Model", "Description", "Labels", "ApiVersion", "Unknown"])
    profile = _profile(manufacturer="maker", model="m1", description="desc", labels=["a", "b"])
    writer = new_xlsx_writer(profile, _to_stream(wb))
    writer.convert_device_info()
    got = [writer.workbook.get_cell_value(DEVICE_INFO_SHEET_NAME, f"B{i}") for i in range(1, 8)]
    assert got == [MOCK_PROFILE_NAME, "maker", "m1", "desc", "a, b", "v3", ""]


def test_convert_device_info_without_header_fails():
    wb = _base_workbook([MAPPING_TABLE_SHEET_NAME, DEVICE_INFO_SHEET_NAME])
    writer = new_xlsx_writer(_profile(), _to_stream(wb))
    with pytest.raises(EdgeXError) as info:
        writer.convert_device_info()
    assert info.value.kind is ErrorKind.CONTRACT_INVALID


def test_convert_device_resources():
    resource = DeviceResource(
        description="this is the mockRes1 resource",
        name="mockRes1",
        is_hidden=False,
        properties=ResourceProperties(value_type="Float32", read_write="R", minimum=0.0),
        attributes={"primaryTable": "HOLDING_REGISTERS", "dataTypeId": {"identifier": 8}},
    )
    writer = new_xlsx_writer(_profile(device_resources=[resource]), _to_stream(_template_workbook()))
    writer.convert_device_resources()
    sheet = DEVICE_RESOURCE_SHEET_NAME
    got = [writer.workbook.get_cell_value(sheet, f"{c}2") for c in "ABCDEFGH"]
    assert got == ["mockRes1", "false", "this is the mockRes1 resource", "Float32", "R",
                   "HOLDING_REGISTERS", "0", "8"]


def test_convert_device_resources_skips_missing_values():
    resource = DeviceResource(name="r1")
    writer = new_xlsx_writer(_profile(device_resources=[resource]), _to_stream(_template_workbook()))
    writer.convert_device_resources()
    sheet = DEVICE_RESOURCE_SHEET_NAME
    assert writer.workbook.get_cell_value(sheet, "A2") == "r1"
    assert writer.workbook.get_cell_value(sheet, "G2") == ""
    assert writer.workbook.get_cell_value(sheet, "H2") == ""


def test_convert_device_resources_non_map_nested_attribute_fails():
    resource = DeviceResource(name="r1", attributes={"dataTypeId": "flat"})
    writer = new_xlsx_writer(_profile(device_resources=[resource]), _to_stream(_template_workbook()))
    with pytest.raises(EdgeXError) as info:
        writer.convert_device_resources()
    assert info.value.kind is ErrorKind.SERVER_ERROR


def test_convert_device_command_name():
    command = DeviceCommand(name="mockCmd1", is_hidden=False)
    writer = new_xlsx_writer(_profile(device_commands=[command]), _to_stream(_template_workbook()))
    writer.convert_device_command()
    assert writer.workbook.get_cell_value(DEVICE_COMMAND_SHEET_NAME, "B1") == "mockCmd1"


def test_convert_device_command_with_resource_operations():
    wb = _template_workbook()
    wb.set_sheet_col(DEVICE_COMMAND_SHEET_NAME, "A1", ["Name", "IsHidden", "ReadWrite", "ResourceOperation"])
    commands = [
        DeviceCommand(name="c1", read_write="RW",
                      resource_operations=[ResourceOperation(device_resource="res1"),
                                           ResourceOperation(device_resource="res2")]),
        DeviceCommand(name="c2", is_hidden=True, read_write="R",
                      resource_operations=[ResourceOperation(device_resource="res3")]),
    ]
    writer = new_xlsx_writer(_profile(device_commands=commands), _to_stream(wb))
    writer.convert_device_command()
    sheet = DEVICE_COMMAND_SHEET_NAME
    assert [writer.workbook.get_cell_value(sheet, f"B{i}") for i in range(1, 6)] == [
        "c1", "FALSE", "RW", "res1", "res2"]
    assert [writer.workbook.get_cell_value(sheet, f"C{i}") for i in range(1, 5)] == [
        "c2", "TRUE", "R", "res3"]


def test_set_resource_name_cells():
    operations = [ResourceOperation(device_resource=n) for n in ("res1", "res2", "res3")]
    writer = new_xlsx_writer(_profile(), _to_stream(_template_workbook()))
    writer.set_resource_name_cells(0, 0, operations)
    sheet = DEVICE_COMMAND_SHEET_NAME
    assert [writer.workbook.get_cell_value(sheet, f"B{i}") for i in (1, 2, 3)] == ["res1", "res2", "res3"]


def test_convert_to_xlsx_writes_output():
    out = io.BytesIO()
    convert_to_xlsx(_to_stream(_template_workbook()), out, _profile())
    out.seek(0)
    assert Workbook.load(out).get_cell_value(DEVICE_INFO_SHEET_NAME, "B1") == MOCK_PROFILE_NAME


def test_convert_to_xlsx_invalid_template():
    wb = _base_workbook([MAPPING_TABLE_SHEET_NAME, DEVICE_INFO_SHEET_NAME, DEVICE_RESOURCE_SHEET_NAME])
    out = io.BytesIO()
    with pytest.raises(EdgeXError) as info:
        convert_to_xlsx(_to_stream(wb), out, DeviceProfile(name="test"))
    assert info.value.kind is ErrorKind.CONTRACT_INVALID
    assert out.getvalue() == b""