import openpyxl
import pytest

import export
from export import Document, ExportError, Section


@pytest.fixture
def doc():
    return Document(
        title="Site Summary Report",
        columns=["ID", "Name"],
        rows=[[1, "Green Valley"], [2, "Lake View"]],
        subtitle="Date Range: 2024-01-01 to 2024-01-31",
        summary="Total Sites: 2",
        sections=[
            Section("Workers assigned to Green Valley", ["ID", "Name", "Role"], [[1, "Ramesh", "Mason"]]),
            Section("Workers assigned to Lake View", ["ID", "Name", "Role"], []),
        ],
    )


def test_failed_render_leaves_no_file(tmp_path, doc, monkeypatch):
    def broken(path, document):
        with open(path, "w") as f:
            f.write("ID,Na")
        raise OSError("disk full")

    monkeypatch.setitem(export._WRITERS, "CSV", broken)
    target = tmp_path / "report.csv"

    with pytest.raises(ExportError, match="disk full"):
        export.write_document(target, "CSV", doc)
    assert list(tmp_path.iterdir()) == []


def test_failed_render_keeps_previous_file(tmp_path, doc, monkeypatch):
    target = tmp_path / "report.csv"
    target.write_text("previous")
    monkeypatch.setitem(export._WRITERS, "CSV", lambda path, document: 1 / 0)

    with pytest.raises(ExportError):
        export.write_document(target, "CSV", doc)
    assert target.read_text() == "previous"


def test_unsupported_format(tmp_path, doc):
    with pytest.raises(ExportError):
        export.write_document(tmp_path / "report.docx", "DOCX", doc)


def test_excel_has_a_sheet_per_section(tmp_path, doc):
    path = export.write_document(tmp_path / "report.xlsx", "EXCEL", doc)
    wb = openpyxl.load_workbook(path)
    assert wb.sheetnames == [
        "Site Summary Report",
        "Workers assigned to Green Valle",
        "Workers assigned to Lake View",
    ]
    ws = wb["Site Summary Report"]
    assert ws["B2"].value == "Green Valley"
    assert ws["A5"].value == "Total Sites: 2"


def test_pdf_is_written(tmp_path, doc):
    path = export.write_document(tmp_path / "report.pdf", "PDF", doc)
    assert path.read_bytes().startswith(b"%PDF")


def test_sheet_names_are_unique_and_short():
    used = set()
    assert export._sheet_name("a" * 40, used) == "a" * 31
    assert export._sheet_name("a" * 40, used) == "a" * 27 + " (2)"
    assert export._sheet_name("x/y:z", used) == "xyz"
