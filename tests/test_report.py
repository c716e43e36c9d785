"""Tests for the XML and TSV report writers."""

from __future__ import annotations

import csv
import io

from lxml import etree

from flint_checker.application.report import (
    render_xml,
    summary_columns,
    write_tsv,
    write_tsv_report,
    write_xml_report,
)
from flint_checker.domain.models import CheckCategory, CheckCheck, CheckResult


def _result(filename: str, *categories: tuple[str, bool], expected=()) -> CheckResult:
    result = CheckResult(filename, "PDF", "1.0", expected)
    for name, passed in categories:
        cc = CheckCategory(name)
        cc.add(CheckCheck(f"{name}-check", passed))
        result.add(cc)
    result.set_time(12)
    return result


class TestXmlReport:
    def test_document_shape(self):
        xml = render_xml([_result("a.pdf", ("A", True)), _result("b.pdf", ("A", False))])
        assert xml.startswith("<?xml version='1.0' encoding='utf-8'?>\n<flint>\n")
        assert xml.endswith("</flint>\n")
        assert "    <checkedFile name='a.pdf' result='passed'" in xml
        assert "        <checkCategory name='A' result='failed'>" in xml

    def test_is_well_formed(self):
        xml = render_xml([_result("Mr Mac Meier's <new> & toys.pdf", ("A", True))])
        root = etree.fromstring(xml.encode("utf-8"))
        assert root.tag == "flint"
        assert root[0].get("name") == "Mr Mac Meier's <new> & toys.pdf"
        assert root[0][0].get("result") == "passed"

    def test_empty_list(self):
        assert render_xml([]) == "<?xml version='1.0' encoding='utf-8'?>\n<flint>\n</flint>\n"

    def test_write(self, tmp_path):
        out = write_xml_report([_result("a.pdf", ("A", True))], tmp_path / "out" / "r.xml")
        assert out.read_text(encoding="utf-8").startswith("<?xml")


class TestTsvReport:
    def test_columns_union_in_first_seen_order(self):
        results = [_result("a.pdf", ("A", True)), _result("b.pdf", ("B", True), ("A", True))]
        columns = summary_columns(results)
        assert columns == ["filename", "format", "version", "result", "timeTaken", "A", "B"]

    def test_rows(self):
        results = [
            _result("a.pdf", ("A", True), expected=["A", "MISSING"]),
            _result("b.pdf", ("B", False)),
        ]
        buffer = io.StringIO()
        write_tsv(results, buffer)
        rows = list(csv.DictReader(io.StringIO(buffer.getvalue()), delimiter="\t"))
        assert rows[0]["filename"] == "a.pdf"
        assert rows[0]["result"] == "erroneous"
        assert rows[0]["MISSING"] == ""
        assert rows[0]["B"] == ""
        assert rows[1]["B"] == "failed"
        assert rows[1]["timeTaken"] == "12"

    def test_write(self, tmp_path):
        out = write_tsv_report([_result("a.pdf", ("A", True))], tmp_path / "r.tsv")
        assert out.read_text(encoding="utf-8").splitlines()[0].split("\t")[0] == "filename"
