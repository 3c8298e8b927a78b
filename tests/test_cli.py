"""
Tests for the command line entry point.
"""

import json

import pytest

from crd.cli import main

SCHEMA = """
name: Person
variants:
  - PersonSummary
fields:
  - name: name
    type: str
  - name: age
    type: int
    annotations:
      - only_in_self
"""

BROKEN_SCHEMA = """
name: Person
variants:
  - PersonSummary
fields:
  - name: age
    type: int
    annotations:
      - only_in("Ghost")
"""

DUPLICATE_SCHEMA = """
name: Person
variants:
  - PersonSummary
  - PersonSummary
fields:
  - name: age
    type: int
"""


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / "person.yaml"
    path.write_text(SCHEMA)
    return path


def test_python_to_stdout(schema_path, capsys):
    assert main([str(schema_path)]) == 0
    out = capsys.readouterr().out
    assert "class PersonSummary(HasName, HasNoAge):" in out
    assert "def into_person(self, age: int) -> Person:" in out


def test_output_file(schema_path, tmp_path):
    target = tmp_path / "models.py"
    assert main([str(schema_path), "-o", str(target)]) == 0
    assert "class Person(HasName, HasAge):" in target.read_text()


def test_json_format(schema_path, capsys):
    assert main([str(schema_path), "-f", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["canonical"] == "Person"


def test_dot_format(schema_path, capsys):
    assert main([str(schema_path), "-f", "dot"]) == 0
    assert "PersonSummary -> Person [style=dashed];" in capsys.readouterr().out


def test_records_format(schema_path, capsys):
    assert main([str(schema_path), "-f", "records"]) == 0
    assert "into_person" not in capsys.readouterr().out


def test_derivation_error_exits_with_single_diagnostic(tmp_path, capsys):
    path = tmp_path / "broken.yaml"
    path.write_text(BROKEN_SCHEMA)
    target = tmp_path / "models.py"
    assert main([str(path), "-o", str(target)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Ghost" in captured.err
    assert not target.exists()


def test_strict_rejects_duplicates(tmp_path, capsys):
    path = tmp_path / "dup.yaml"
    path.write_text(DUPLICATE_SCHEMA)
    assert main([str(path), "--strict"]) == 1
    assert "PersonSummary" in capsys.readouterr().err


def test_missing_schema(tmp_path, capsys):
    assert main([str(tmp_path / "nope.yaml")]) == 1
    assert "not found" in capsys.readouterr().err


def test_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2


@pytest.mark.parametrize("content", [
    b"name: Person\noptions:\n  fallbacks: [1]\n",
    b"name: P\xe9rson\xff\n",
])
def test_malformed_schema_exits_with_single_diagnostic(tmp_path, capsys, content):
    path = tmp_path / "bad.yaml"
    path.write_bytes(content)
    assert main([str(path)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("crd: error: ")
    assert len(captured.err.strip().splitlines()) == 1


def test_schema_path_is_a_directory(tmp_path, capsys):
    path = tmp_path / "schemas.yaml"
    path.mkdir()
    assert main([str(path)]) == 1
    assert "crd: error:" in capsys.readouterr().err


def test_unwritable_output(schema_path, tmp_path, capsys):
    target = tmp_path / "missing_dir" / "models.py"
    assert main([str(schema_path), "-o", str(target)]) == 1
    assert "cannot write" in capsys.readouterr().err
    assert not target.exists()
