"""A small in-memory xlsx workbook that reads and writes cell values."""

from __future__ import annotations

import re
import zipfile
import xml.etree.ElementTree as ET
from typing import Any, BinaryIO, Iterable

_MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
_PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
_MAX_COLUMNS = 16384
_CELL_RE = re.compile(r"^([A-Za-z]+)([0-9]+)$")


def column_number_to_name(number: int) -> str:
    """Return the column letters for a 1-based column number."""
    if number < 1 or number > _MAX_COLUMNS:
        raise ValueError(f"the column number must be between 1 and {_MAX_COLUMNS}, got {number}")
    letters = ""
    while number > 0:
        number, rem = divmod(number - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def _column_name_to_number(name: str) -> int:
    if not name or not name.isalpha() or not name.isascii():
        raise ValueError(f"invalid column name {name!r}")
    number = 0
    for ch in name.upper():
        number = number * 26 + ord(ch) - ord("A") + 1
    if number > _MAX_COLUMNS:
        raise ValueError(f"column {name!r} out of range")
    return number


def split_cell_name(cell: str) -> tuple[str, int]:
    """Split a cell reference such as ``AB12`` into ``("AB", 12)``."""
    match = _CELL_RE.match(cell)
    if not match or int(match.group(2)) < 1:
        raise ValueError(f"invalid cell name {cell!r}")
    return match.group(1).upper(), int(match.group(2))


def _coords(cell: str) -> tuple[int, int]:
    col, row = split_cell_name(cell)
    return row, _column_name_to_number(col)


def _format(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def _parse_number(text: str) -> Any:
    try:
        return int(text)
    except ValueError:
        try:
            return float(text)
        except ValueError:
            return text


class Workbook:
    """Sheets of cells keyed by (row, column), both 1-based."""

    def __init__(self):
        self._sheets: dict[str, dict[tuple[int, int], Any]] = {"Sheet1": {}}

    @classmethod
    def load(cls, stream: BinaryIO) -> "Workbook":
        """Read a workbook from a binary stream holding an xlsx file."""
        try:
            archive = zipfile.ZipFile(stream)
        except zipfile.BadZipFile as exc:
            raise ValueError("not an xlsx file") from exc
        with archive:
            names = set(archive.namelist())
            shared: list[str] = []
            if "xl/sharedStrings.xml" in names:
                root = ET.fromstring(archive.read("xl/sharedStrings.xml"))
                for si in root.iter(f"{{{_MAIN_NS}}}si"):
                    shared.append("".join(t.text or "" for t in si.iter(f"{{{_MAIN_NS}}}t")))
            targets: dict[str, str] = {}
            if "xl/_rels/workbook.xml.rels" in names:
                rels = ET.fromstring(archive.read("xl/_rels/workbook.xml.rels"))
                for rel in rels.iter(f"{{{_PKG_REL_NS}}}Relationship"):
                    target = rel.get("Target", "")
                    target = target.lstrip("/") if target.startswith("/") else "xl/" + target
                    targets[rel.get("Id", "")] = target
            try:
                wb_root = ET.fromstring(archive.read("xl/workbook.xml"))
            except KeyError as exc:
                raise ValueError("workbook part missing") from exc
            book = cls()
            book._sheets = {}
            for sheet in wb_root.iter(f"{{{_MAIN_NS}}}sheet"):
                name = sheet.get("name", "")
                path = targets.get(sheet.get(f"{{{_REL_NS}}}id", ""), "")
                cells: dict[tuple[int, int], Any] = {}
                if path in names:
                    cells = cls._read_sheet(archive.read(path), shared)
                book._sheets[name] = cells
            return book

    @staticmethod
    def _read_sheet(data: bytes, shared: list[str]) -> dict[tuple[int, int], Any]:
        cells: dict[tuple[int, int], Any] = {}
        root = ET.fromstring(data)
        for row_no, row in enumerate(root.iter(f"{{{_MAIN_NS}}}row"), start=1):
            row_index = int(row.get("r", row_no))
            col_index = 0
            for c in row.iter(f"{{{_MAIN_NS}}}c"):
                ref = c.get("r")
                if ref:
                    row_index, col_index = _coords(ref)
                else:
                    col_index += 1
                kind = c.get("t", "n")
                v = c.find(f"{{{_MAIN_NS}}}v")
                text = v.text if v is not None and v.text is not None else None
                if kind == "inlineStr":
                    value: Any = "".join(t.text or "" for t in c.iter(f"{{{_MAIN_NS}}}t"))
                elif text is None:
                    continue
                elif kind == "s":
                    value = shared[int(text)]
                elif kind == "b":
                    value = text.strip() == "1"
                elif kind in ("str", "e"):
                    value = text
                else:
                    value = _parse_number(text)
                cells[(row_index, col_index)] = value
        return cells

    def save(self, stream: BinaryIO) -> None:
        """Write the workbook as an xlsx file to a binary stream."""
        with zipfile.ZipFile(stream, "w", zipfile.ZIP_DEFLATED) as archive:
            sheet_parts = [f"xl/worksheets/sheet{i}.xml" for i in range(1, len(self._sheets) + 1)]
            overrides = "".join(
                f'<Override PartName="/{p}" ContentType="application/vnd.openxmlformats-'
                f'officedocument.spreadsheetml.worksheet+xml"/>' for p in sheet_parts)
            archive.writestr(
                "[Content_Types].xml",
                '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
                '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
                '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
                '<Default Extension="xml" ContentType="application/xml"/>'
                '<Override PartName="/xl/workbook.xml" ContentType="application/vnd.openxmlformats-'
                'officedocument.spreadsheetml.sheet.main+xml"/>' + overrides + "</Types>")
            archive.writestr(
                "_rels/.rels",
                f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?><Relationships xmlns="{_PKG_REL_NS}">'
                f'<Relationship Id="rId1" Type="{_REL_NS}/officeDocument" Target="xl/workbook.xml"/>'
                "</Relationships>")
            wb = ET.Element(f"{{{_MAIN_NS}}}workbook")
            sheets_el = ET.SubElement(wb, f"{{{_MAIN_NS}}}sheets")
            rels = ET.Element(f"{{{_PKG_REL_NS}}}Relationships")
            for i, name in enumerate(self._sheets, start=1):
                ET.SubElement(sheets_el, f"{{{_MAIN_NS}}}sheet",
                              {"name": name, "sheetId": str(i), f"{{{_REL_NS}}}id": f"rId{i}"})
                ET.SubElement(rels, f"{{{_PKG_REL_NS}}}Relationship",
                              {"Id": f"rId{i}", "Type": f"{_REL_NS}/worksheet",
                               "Target": f"worksheets/sheet{i}.xml"})
            ET.register_namespace("", _MAIN_NS)
            ET.register_namespace("r", _REL_NS)
            archive.writestr("xl/workbook.xml", ET.tostring(wb, xml_declaration=True, encoding="UTF-8"))
            archive.writestr("xl/_rels/workbook.xml.rels",
                             ET.tostring(rels, xml_declaration=True, encoding="UTF-8"))
            for part, cells in zip(sheet_parts, self._sheets.values()):
                archive.writestr(part, self._sheet_xml(cells))

    @staticmethod
    def _sheet_xml(cells: dict[tuple[int, int], Any]) -> bytes:
        ws = ET.Element(f"{{{_MAIN_NS}}}worksheet")
        data = ET.SubElement(ws, f"{{{_MAIN_NS}}}sheetData")
        current_row = None
        row_el = None
        for (r, c), value in sorted(cells.items()):
            if r != current_row:
                current_row = r
                row_el = ET.SubElement(data, f"{{{_MAIN_NS}}}row", {"r": str(r)})
            ref = f"{column_number_to_name(c)}{r}"
            if isinstance(value, bool):
                cell = ET.SubElement(row_el, f"{{{_MAIN_NS}}}c", {"r": ref, "t": "b"})
                ET.SubElement(cell, f"{{{_MAIN_NS}}}v").text = "1" if value else "0"
            elif isinstance(value, (int, float)):
                cell = ET.SubElement(row_el, f"{{{_MAIN_NS}}}c", {"r": ref})
                ET.SubElement(cell, f"{{{_MAIN_NS}}}v").text = repr(value)
            else:
                cell = ET.SubElement(row_el, f"{{{_MAIN_NS}}}c", {"r": ref, "t": "inlineStr"})
                is_el = ET.SubElement(cell, f"{{{_MAIN_NS}}}is")
                t = ET.SubElement(is_el, f"{{{_MAIN_NS}}}t")
                t.set("xml:space", "preserve")
                t.text = str(value)
        return ET.tostring(ws, xml_declaration=True, encoding="UTF-8")

    def sheet_names(self) -> list[str]:
        return list(self._sheets)

    def new_sheet(self, name: str) -> int:
        """Add a sheet if missing and return its 0-based index."""
        self._sheets.setdefault(name, {})
        return list(self._sheets).index(name)

    def _cells(self, sheet: str) -> dict[tuple[int, int], Any]:
        try:
            return self._sheets[sheet]
        except KeyError:
            raise ValueError(f"sheet {sheet} does not exist") from None

    def get_rows(self, sheet: str) -> list[list[str]]:
        """All rows as strings, dropping trailing empty cells and rows."""
        return self._lines(self._cells(sheet), by_row=True)

    def get_cols(self, sheet: str) -> list[list[str]]:
        """All columns as strings, dropping trailing empty cells and columns."""
        return self._lines(self._cells(sheet), by_row=False)

    @staticmethod
    def _lines(cells: dict[tuple[int, int], Any], by_row: bool) -> list[list[str]]:
        grouped: dict[int, dict[int, str]] = {}
        for (r, c), value in cells.items():
            text = _format(value)
            if text:
                outer, inner = (r, c) if by_row else (c, r)
                grouped.setdefault(outer, {})[inner] = text
        if not grouped:
            return []
        lines = []
        for outer in range(1, max(grouped) + 1):
            entries = grouped.get(outer, {})
            lines.append([entries.get(i, "") for i in range(1, max(entries, default=0) + 1)])
        return lines

    def get_cell_value(self, sheet: str, cell: str) -> str:
        return _format(self._cells(sheet).get(_coords(cell)))

    def set_cell_value(self, sheet: str, cell: str, value: Any) -> None:
        cells = self._cells(sheet)
        key = _coords(cell)
        if value is None:
            cells.pop(key, None)
        else:
            cells[key] = value

    def set_sheet_row(self, sheet: str, cell: str, values: Iterable[Any]) -> None:
        row, col = _coords(cell)
        for offset, value in enumerate(values):
            self.set_cell_value(sheet, f"{column_number_to_name(col + offset)}{row}", value)

    def set_sheet_col(self, sheet: str, cell: str, values: Iterable[Any]) -> None:
        row, col = _coords(cell)
        name = column_number_to_name(col)
        for offset, value in enumerate(values):
            self.set_cell_value(sheet, f"{name}{row + offset}", value)

    def insert_cols(self, sheet: str, column: str, count: int) -> None:
        """Insert ``count`` empty columns before ``column``."""
        cells = self._cells(sheet)
        if count < 1:
            raise ValueError("the number of columns to insert must be positive")
        start = _column_name_to_number(column)
        if any(c + count > _MAX_COLUMNS for (_, c) in cells if c >= start):
            raise ValueError("inserting columns would exceed the column limit")
        self._sheets[sheet] = {
            (r, c + count if c >= start else c): v for (r, c), v in cells.items()
        }