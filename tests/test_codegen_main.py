"""
Tests for a complete generation pass: selection, rendering, formatting and writing.
"""
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from json_snake_generator.codegen_main import (
    generate_marshal_code,
    render_generated_file,
    select_declarations,
    write_generated_file,
)
from json_snake_generator.config_validation import GeneratorConfigSchema
from json_snake_generator.domain.models import GenerationResult
from json_snake_generator.exceptions import (
    DuplicateDeclarationError,
    OutputWriteError,
    TypeNotFoundError,
)
from json_snake_generator.introspection_go import introspect_package


EXPECTED_USER_FILE = """\
// Code generated by "json-snake -t User"; DO NOT EDIT.

package models

import "encoding/json"

type UserJSON struct {
\tID int `json:"id"`
\tUserName string `json:"user_name,omitempty"`
}

func (m User) MarshalJSON() ([]byte, error) {
\tj := NewUserJSON(&m)
\treturn json.Marshal(j)
}

func NewUserJSON(m *User) *UserJSON {
\tv := &UserJSON{}
\tv.ID = m.ID
\tv.UserName = m.UserName
\treturn v
}
"""


def _config(directory, **overrides) -> GeneratorConfigSchema:
    values = {"type_names": ["User"], "directory": str(directory), "format_output": False}
    values.update(overrides)
    return GeneratorConfigSchema(**values)


def test_generate_user_file(user_package):
    result = generate_marshal_code(_config(user_package), command="json-snake -t User")
    assert result.code == EXPECTED_USER_FILE
    assert result.package_name == "models"
    assert result.type_names == ["User"]
    assert result.output_path == str(Path(user_package) / "user_json.go")
    assert result.is_formatted is False
    assert result.warnings == []
    assert result.code_lines == len(EXPECTED_USER_FILE.splitlines())


def test_generation_is_byte_identical_across_runs(user_package):
    first = generate_marshal_code(_config(user_package))
    second = generate_marshal_code(_config(user_package))
    assert first.code == second.code


def test_declarations_follow_source_order(go_package):
    directory = go_package({
        "models.go": """\
            package models

            type Account struct {
            	Balance int
            }

            type User struct {
            	ID int
            }
            """,
    })
    result = generate_marshal_code(_config(directory, type_names=["User", "Account"]))
    assert result.type_names == ["Account", "User"]
    assert result.code.index("type AccountJSON") < result.code.index("type UserJSON")
    assert result.code.count('import "encoding/json"') == 1
    assert result.code.endswith("}\n") and not result.code.endswith("\n\n")
    # the default output file is named after the first requested type
    assert result.output_path.endswith("user_json.go")


def test_skipped_fields_are_reported(go_package):
    directory = go_package({
        "event.go": """\
            package models

            import "time"

            type Event struct {
            	Name string
            	At   time.Time
            	note string
            }
            """,
    })
    result = generate_marshal_code(_config(directory, type_names=["Event"]))
    assert [str(skipped) for skipped in result.skipped_fields] == [
        "Event.At (time.Time): type references package 'time'",
        "Event.note (string): unexported fields are not serialized",
    ]
    assert "v.At" not in result.code
    assert '"time"' not in result.code
    assert result.to_dict()["skipped_fields"][1].startswith("Event.note")


def test_all_policy_adds_imports(go_package):
    directory = go_package({
        "event.go": """\
            package models

            import "time"

            type Event struct {
            	At time.Time
            }
            """,
    })
    result = generate_marshal_code(
        _config(directory, type_names=["Event"], field_policy="all")
    )
    assert 'import (\n\t"encoding/json"\n\t"time"\n)\n' in result.code
    assert "\tv.At = m.At\n" in result.code


def test_missing_type(user_package):
    with pytest.raises(TypeNotFoundError, match="No struct type named 'Account'"):
        generate_marshal_code(_config(user_package, type_names=["Account"]))


def test_non_struct_type_is_not_found(go_package):
    directory = go_package({"ids.go": "package models\n\ntype ID int\n"})
    with pytest.raises(TypeNotFoundError):
        generate_marshal_code(_config(directory, type_names=["ID"]))


def test_duplicate_declaration(go_package):
    directory = go_package({
        "a.go": "package models\n\ntype User struct {\n\tID int\n}\n",
        "b.go": "package models\n\ntype User struct {\n\tName string\n}\n",
    })
    package = introspect_package(str(directory))
    with pytest.raises(DuplicateDeclarationError) as exc_info:
        select_declarations(package, ["User"])
    locations = exc_info.value.context["locations"]
    assert "a.go:3" in locations and "b.go:3" in locations


def test_formatted_output(user_package):
    completed = subprocess.CompletedProcess(["gofmt"], 0, stdout="formatted\n", stderr="")
    with patch("json_snake_generator.codegen_utils.subprocess.run", return_value=completed) as run:
        result = generate_marshal_code(_config(user_package, format_output=True))
    assert result.code == "formatted\n"
    assert result.is_formatted is True
    assert result.code_lines == 1
    assert run.call_args.args[0] == ["gofmt"]
    assert run.call_args.kwargs["input"].startswith("// Code generated by")


def test_formatter_failure_falls_back_to_raw_code(user_package, caplog):
    completed = subprocess.CompletedProcess(["gofmt"], 2, stdout="", stderr="<standard input>:3:1: expected 'package'")
    with patch("json_snake_generator.codegen_utils.subprocess.run", return_value=completed):
        result = generate_marshal_code(_config(user_package, format_output=True), command="json-snake -t User")
    assert result.code == EXPECTED_USER_FILE
    assert result.is_formatted is False
    assert len(result.warnings) == 1
    assert "Could not format generated code" in caplog.text


def test_missing_formatter_binary(user_package):
    with patch("json_snake_generator.codegen_utils.subprocess.run", side_effect=FileNotFoundError("gofmt")):
        result = generate_marshal_code(_config(user_package, format_output=True))
    assert result.is_formatted is False
    assert "not gofmt-formatted" in result.warnings[0]


def test_render_generated_file_returns_generated_types(user_package):
    package = introspect_package(str(user_package))
    code, generated_types = render_generated_file(package.name, package.declarations)
    assert [generated.mirror_name for generated in generated_types] == ["UserJSON"]
    assert code.startswith('// Code generated by "json-snake"; DO NOT EDIT.\n')


def test_write_generated_file(tmp_path):
    output = tmp_path / "nested" / "user_json.go"
    result = GenerationResult(code="package models\n", output_path=str(output))
    assert write_generated_file(result) == output
    assert output.read_bytes() == b"package models\n"


def test_write_generated_file_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    result = GenerationResult(code="package models\n", output_path=str(blocker / "out.go"))
    with pytest.raises(OutputWriteError):
        write_generated_file(result)


def test_qualifier_bound_to_two_paths_across_files(go_package):
    directory = go_package({
        "a.go": """\
            package models

            import "example.com/a/util"

            type A struct {
            	Cfg util.Config
            }
            """,
        "b.go": """\
            package models

            import "example.com/b/util"

            type B struct {
            	Opts util.Options
            }
            """,
    })
    result = generate_marshal_code(
        _config(directory, type_names=["A", "B"], field_policy="all")
    )
    assert result.code.count("util\"") == 1
    assert '\t"example.com/a/util"\n' in result.code
    assert "example.com/b/util" not in result.code
    assert [skipped.field_name for skipped in result.skipped_fields] == ["Opts"]


def test_build_target_selects_platform_file(go_package):
    directory = go_package({
        "stat_linux.go": "package fs\n\ntype Stat struct {\n\tInode uint64\n}\n",
        "stat_windows.go": "package fs\n\ntype Stat struct {\n\tFileIndex uint64\n}\n",
    })
    result = generate_marshal_code(
        _config(directory, type_names=["Stat"], goos="windows", goarch="amd64")
    )
    assert "\tFileIndex uint64 `json:\"file_index\"`\n" in result.code
    assert "Inode" not in result.code
