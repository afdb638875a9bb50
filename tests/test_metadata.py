# tests/test_metadata.py
import pytest

from vaas_hook.models.schemas import InstanceDescriptor
from vaas_hook.services.metadata import InstanceMetadata, parse_int


def _meta(**kwargs) -> InstanceMetadata:
    return InstanceMetadata(InstanceDescriptor(**kwargs))


def test_unset_label_differs_from_empty_label():
    assert _meta(labels={}).director() is None
    assert _meta(labels={"director": ""}).director() == ""


def test_weight_label_parsing():
    assert _meta(labels={"weight": "3"}).weight() == 3
    with pytest.raises(KeyError):
        _meta(labels={}).weight()
    with pytest.raises(ValueError):
        _meta(labels={"weight": "three"}).weight()


def test_flags():
    meta = _meta(labels={"canary": "1", "vaas-queue": "true"})
    assert meta.is_canary() is True
    assert meta.is_async() is True

    plain = _meta(labels={"canary": "", "vaas-queue": "yes"})
    assert plain.is_canary() is False
    assert plain.is_async() is False


def test_ports_and_env():
    meta = _meta(ports=[31000, 31001], env={"VAAS_INITIAL_WEIGHT": "10"})
    assert meta.ports() == [31000, 31001]
    assert meta.env_value("VAAS_INITIAL_WEIGHT") == "10"
    assert meta.env_value("MISSING") is None


@pytest.mark.parametrize("raw, expected", [("5", 5), ("-3", -3), ("+7", 7), ("007", 7)])
def test_parse_int_accepts_plain_integers(raw, expected):
    assert parse_int(raw) == expected


@pytest.mark.parametrize("raw", ["", " 5", "5 ", "5_0", "5.0", "0x10", "٥"])
def test_parse_int_rejects_non_decimal_strings(raw):
    with pytest.raises(ValueError):
        parse_int(raw)


def test_weight_label_is_parsed_strictly():
    with pytest.raises(ValueError):
        _meta(labels={"weight": "1_0"}).weight()
