import pytest

from json_snake_generator.domain.type_spelling import (
    declares_inline_type,
    default_package_name,
    is_unqualified,
    package_qualifiers,
)


@pytest.mark.parametrize(
    "spelling, expected",
    [
        ("int", []),
        ("[]User", []),
        ("*time.Time", ["time"]),
        ("map[string]*time.Time", ["time"]),
        ("map[uuid.UUID][]sql.NullString", ["uuid", "sql"]),
        ("[]time.Duration", ["time"]),
        ('struct{A int `json:"a.b"`}', []),
    ],
)
def test_package_qualifiers(spelling, expected):
    assert package_qualifiers(spelling) == expected


def test_inline_declarations():
    assert declares_inline_type("struct{A int}")
    assert declares_inline_type("func(int) error")
    assert declares_inline_type("interface{String() string}")
    assert not declares_inline_type("interface{}")
    assert not declares_inline_type("struct{}")
    assert not declares_inline_type("[]string")


def test_is_unqualified():
    assert is_unqualified("map[string]int")
    assert is_unqualified("*User")
    assert not is_unqualified("time.Time")
    assert not is_unqualified("func()")


@pytest.mark.parametrize(
    "import_path, expected",
    [
        ("time", "time"),
        ("encoding/json", "json"),
        ("github.com/google/uuid", "uuid"),
        ("gopkg.in/yaml.v3", "yaml"),
        ("github.com/jackc/pgx/v5", "pgx"),
    ],
)
def test_default_package_name(import_path, expected):
    assert default_package_name(import_path) == expected
