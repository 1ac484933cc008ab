"""Tests for CSV input loading."""

import pytest

from teams_provision.input_reader import InputError, load_rows

HEADER = "Owner,MailNickName,SectionNumber,Description,CourseName,DisplayName,SourceM365Group\n"


def _write(tmp_path, content, encoding="utf-8"):
    path = tmp_path / "classes.csv"
    path.write_text(content, encoding=encoding)
    return path


def test_loads_rows_with_aliases(tmp_path):
    path = _write(
        tmp_path,
        HEADER + "t@x.edu, class7a-math ,7A,Algebra,Math,Class 7a Math,old@x.edu\n",
    )
    rows = load_rows(path)
    assert len(rows) == 1
    row = rows[0]
    assert row.owner == "t@x.edu"
    assert row.mail_nickname == "class7a-math"
    assert row.section_number == "7A"
    assert row.description == "Algebra"
    assert row.course_name == "Math"
    assert row.display_name == "Class 7a Math"
    assert row.source_group_mail == "old@x.edu"
    assert row.line_number == 2


def test_handles_bom_and_padded_headers(tmp_path):
    content = HEADER.replace("MailNickName", " MailNickName ") + ",nick,,,,Name,\n"
    path = _write(tmp_path, content, encoding="utf-8-sig")
    rows = load_rows(path)
    assert rows[0].mail_nickname == "nick"
    assert rows[0].owner == ""


def test_blank_lines_are_skipped_and_blank_values_kept(tmp_path):
    path = _write(tmp_path, HEADER + ",,,,,,\n" + "t@x.edu,,,,,Name Only,\n")
    rows = load_rows(path)
    assert len(rows) == 1
    assert rows[0].mail_nickname == ""
    assert rows[0].line_number == 3


def test_optional_columns_may_be_absent(tmp_path):
    path = _write(tmp_path, "MailNickName,DisplayName\nnick,Name\n")
    rows = load_rows(path)
    assert rows[0].source_group_mail == ""


def test_missing_file(tmp_path):
    with pytest.raises(InputError, match="not found"):
        load_rows(tmp_path / "nope.csv")


def test_empty_file(tmp_path):
    with pytest.raises(InputError, match="no header"):
        load_rows(_write(tmp_path, ""))


def test_missing_required_column(tmp_path):
    with pytest.raises(InputError, match="DisplayName"):
        load_rows(_write(tmp_path, "Owner,MailNickName\nt@x.edu,nick\n"))
