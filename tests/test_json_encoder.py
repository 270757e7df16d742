import datetime
import decimal
import json
import uuid

import pytest

from restdoc.json_encoder import RestJSONEncoder
from conftest import Pet


@pytest.mark.parametrize(
    "value, expected",
    [
        (datetime.datetime(2024, 1, 2, 3, 4, 5), "2024-01-02T03:04:05"),
        (datetime.date(2024, 1, 2), "2024-01-02"),
        (datetime.time(3, 4), "03:04:00"),
        (datetime.timedelta(hours=1), "1:00:00"),
        (uuid.UUID("12345678-1234-5678-1234-567812345678"), "12345678-1234-5678-1234-567812345678"),
        (decimal.Decimal("1.5"), 1.5),
        (b"\x01\xff", "01ff"),
        (b"", ""),
    ],
)
def test_encode(value, expected) -> None:
    assert json.loads(json.dumps({"value": value}, cls=RestJSONEncoder)) == {"value": expected}


def test_encode_set() -> None:
    assert json.loads(json.dumps({1}, cls=RestJSONEncoder)) == [1]


def test_encode_document(app) -> None:
    pet = Pet.create({"name": "rex", "chip_code": "123"}).save()

    encoded = json.loads(json.dumps(pet, cls=RestJSONEncoder))

    assert encoded["name"] == "rex"
    assert "chip_code" not in encoded


def test_unknown_type() -> None:
    with pytest.raises(TypeError):
        json.dumps(object(), cls=RestJSONEncoder)


def test_app_json_provider(app) -> None:
    pet = Pet.create({"name": "rex"}).save()

    assert app.json.loads(app.json.dumps({"pet": pet}))["pet"]["name"] == "rex"
