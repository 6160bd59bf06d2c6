"""Unit tests for the command-line interface."""

import json

import pytest

from typewire.cli import main


class TestCli:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage: typewire" in capsys.readouterr().out

    def test_describe_record(self, capsys, handlers_module):
        assert main(["describe", f"{handlers_module}:Person"]) == 0
        out = capsys.readouterr().out.strip()
        assert out == (
            '{"kind":"struct",'
            '"struct":{"Age":{"kind":"int64"},"Name":{"kind":"string"}},'
            '"extra":{"field_0":"Name","field_1":"Age","fields_number":2}}'
        )

    def test_describe_function(self, capsys, handlers_module):
        assert main(["describe", f"{handlers_module}:add"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["kind"] == "func"
        assert data["extra"] == {"in_number": 2, "out_number": 1, "variadic": False}

    def test_describe_pretty(self, capsys, handlers_module):
        assert main(["describe", f"{handlers_module}:Person", "--pretty"]) == 0
        out = capsys.readouterr().out
        assert "\n  " in out
        assert list(json.loads(out)) == ["kind", "struct", "extra"]

    def test_describe_unrepresentable(self, capsys, handlers_module):
        assert main(["describe", f"{handlers_module}:NOT_A_FUNCTION"]) == 1
        assert capsys.readouterr().err.startswith("error:")

    def test_describe_bad_path(self, capsys):
        assert main(["describe", "not-a-path"]) == 1
        assert "module:attribute" in capsys.readouterr().err

    def test_describe_missing_module(self, capsys):
        assert main(["describe", "typewire_no_such_module:x"]) == 1
        assert "error:" in capsys.readouterr().err

    def test_functions(self, capsys, tmp_path, handlers_module):
        f = tmp_path / "registry.json"
        f.write_text(json.dumps({"functions": [
            f"{handlers_module}:add", f"{handlers_module}:count_ages",
        ]}))
        assert main(["functions", str(f)]) == 0
        out = capsys.readouterr().out
        assert f"{handlers_module}:add" in out
        assert f"{handlers_module}:count_ages" in out
        assert "2 function(s) registered" in out

    def test_functions_missing_file(self, capsys, tmp_path):
        assert main(["functions", str(tmp_path / "missing.json")]) == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_describe_requires_target(self):
        with pytest.raises(SystemExit):
            main(["describe"])
