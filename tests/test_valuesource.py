import json

import pytest

from cnabkit.valuesource import Source, Strategy, ValueSet, is_valid


def test_set_merge():
    value_set = ValueSet({"first": "first", "second": "second", "third": "third"})

    value_set.merge(ValueSet())
    assert len(value_set) == 3
    assert "fourth" not in value_set

    value_set.merge(ValueSet({"fourth": "fourth"}))
    assert len(value_set) == 4
    assert "fourth" in value_set

    with pytest.raises(ValueError) as excinfo:
        value_set.merge(ValueSet({"second": "bis"}))
    assert str(excinfo.value) == (
        'ambiguous value resolution: "second" is already present in base sets, cannot merge'
    )
    assert value_set["second"] == "second"


def test_merge_rejects_identical_duplicate():
    value_set = ValueSet({"a": "1"})
    with pytest.raises(ValueError):
        value_set.merge({"a": "1"})


def test_is_valid():
    value_set = ValueSet({"first": "1"})
    assert is_valid(value_set, "first") is True
    assert is_valid(value_set, "second") is False


def test_source_raw_round_trip():
    source = Source(key="env", value="CONN_STRING")
    assert source.to_raw() == {"env": "CONN_STRING"}
    assert Source.from_raw(source.to_raw()) == source


def test_empty_source_raw_is_none():
    assert Source().to_raw() is None
    assert Source.from_raw(None) == Source()
    assert Source.from_raw({}) == Source()


def test_source_multiple_pairs_rejected():
    with pytest.raises(ValueError) as excinfo:
        Source.from_raw({"env": "A", "path": "B"})
    assert str(excinfo.value) == (
        "multiple key/value pairs specified for source but only one may be defined"
    )


def test_source_json_round_trip():
    source = Source(key="path", value="/tmp/connstring.txt")
    text = source.to_json()
    assert json.loads(text) == {"path": "/tmp/connstring.txt"}
    assert Source.from_json(text) == source


def test_empty_source_json():
    assert Source().to_json() == "null"
    assert Source.from_json("null") == Source()


def test_source_json_rejects_non_string_values():
    with pytest.raises(ValueError):
        Source.from_json('{"env": 5}')


def test_source_yaml_round_trip():
    source = Source(key="key", value="conn-string")
    assert Source.from_yaml(source.to_yaml()) == source


def test_source_yaml_keeps_numbers_as_text():
    assert Source.from_yaml("value: 42\n") == Source(key="value", value="42")


def test_empty_source_yaml_round_trip():
    assert Source.from_yaml(Source().to_yaml()) == Source()


def test_source_yaml_multiple_pairs_rejected():
    with pytest.raises(ValueError):
        Source.from_yaml("env: A\npath: B\n")


def test_strategy_dict_round_trip_omits_value():
    strategy = Strategy(name="conn", source=Source(key="env", value="CONN"), value="loaded")
    data = strategy.to_dict()
    assert data == {"name": "conn", "source": {"env": "CONN"}}
    restored = Strategy.from_dict(data)
    assert restored.name == "conn"
    assert restored.source == Source(key="env", value="CONN")
    assert restored.value == ""


def test_strategy_from_dict_without_source():
    restored = Strategy.from_dict({"name": "conn"})
    assert restored.source == Source()