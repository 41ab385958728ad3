"""Test calibration of raw reply values."""
import pytest

from ble_soil_sensor.calibration import (CalibrationMapper, is_error_sentinel,
                                         parse_decimal)
from ble_soil_sensor.devices.soil_tester import (LEGACY_SOIL_TESTER_SENSORS,
                                                 SOIL_TESTER_SENSORS)
from ble_soil_sensor.errors import NoSensorDataError
from ble_soil_sensor.models import SensorDescriptor
from ble_soil_sensor.parsers import ResponseParser

SENTINELS = ["O.00", "O.0", "O", "o.0", "2000001", "2000003", "0.00", "ERROR", "error", ""]


def test_measurement_with_offline_probes(parser, mapper):
    """Test a reply where two probes report the letter O error token."""
    raw = parser.parse('{"4102":"24300.0","4108":"O.00","4110":"O.0"}\r\nok\r\n')

    readings = mapper.calibrate(raw)

    assert readings.data[0] == pytest.approx(24.3)
    assert readings.data[1:] == [None, None]
    assert readings.labels == [
        "Soil Moisture (%)",
        "Soil Conductivity (μS/cm)",
        "Soil pH (pH)",
    ]


def test_measurement_from_bare_pairs(parser, mapper):
    """Test calibration of values recovered from bare pairs."""
    readings = mapper.calibrate(parser.parse("4102:24300.0,4104=87\r\nok\r\n"))

    assert readings.data == [pytest.approx(24.3), pytest.approx(87.0)]
    assert readings.labels == ["Soil Moisture (%)", "Battery (%)"]
    assert readings.as_dict() == {
        "Soil Moisture (%)": pytest.approx(24.3),
        "Battery (%)": pytest.approx(87.0),
    }


def test_measurement_from_bare_values():
    """Test a bare value list with a four digit conductivity."""
    parser = ResponseParser(("4102", "4108", "4110"))
    mapper = CalibrationMapper(SOIL_TESTER_SENSORS)

    readings = mapper.calibrate(parser.parse("24300.0,1200,650\r\nok\r\n"))

    assert readings.labels == [
        "Soil Moisture (%)",
        "Soil Conductivity (μS/cm)",
        "Soil pH (pH)",
    ]
    assert readings.data == [
        pytest.approx(24.3, rel=1e-9),
        pytest.approx(1.2, rel=1e-9),
        pytest.approx(6.5, rel=1e-9),
    ]


@pytest.mark.parametrize("identifier", list(SOIL_TESTER_SENSORS))
@pytest.mark.parametrize("sentinel", SENTINELS)
def test_sentinels_are_unavailable(mapper, identifier, sentinel):
    """Test every error sentinel yields an unavailable reading."""
    readings = mapper.calibrate({identifier: sentinel})

    reading = readings.get(identifier)
    assert reading.value is None
    assert not reading.available
    assert reading.label == SOIL_TESTER_SENSORS[identifier].label
    assert reading.raw == sentinel


@pytest.mark.parametrize("raw_value", ["24300.0", "87", "-1500", "0", "1e3", "650", " 12.5 "])
def test_numeric_values_are_scaled(mapper, raw_value):
    """Test numeric values are divided by the descriptor factor."""
    descriptor = SOIL_TESTER_SENSORS["4110"]

    value = mapper.calibrate_value(descriptor, raw_value)

    assert value == pytest.approx(float(raw_value) / descriptor.scale, rel=1e-9)


@pytest.mark.parametrize("raw_value", ["abc", "12abc", "nan", "inf", "1_000", "0x10"])
def test_garbage_values_are_unavailable(mapper, raw_value):
    """Test values that are neither sentinels nor decimals."""
    assert mapper.calibrate_value(SOIL_TESTER_SENSORS["4102"], raw_value) is None


def test_unknown_identifiers_are_skipped(mapper, log_sink):
    """Test identifiers missing from the registry are dropped."""
    readings = mapper.calibrate({"9999": "1", "4102": "1000", "0001": "x"})

    assert [reading.identifier for reading in readings] == ["4102"]
    assert any("9999" in call.args[0] for call in log_sink.call_args_list)


def test_no_known_identifiers(mapper):
    """Test a reply with nothing the registry knows."""
    with pytest.raises(NoSensorDataError):
        mapper.calibrate({"9999": "1"})

    with pytest.raises(NoSensorDataError):
        mapper.calibrate({})


def test_reply_order_is_kept(mapper):
    """Test readings follow the order of the reply."""
    readings = mapper.calibrate({"4110": "700", "4102": "1000"})

    assert [reading.identifier for reading in readings] == ["4110", "4102"]
    assert readings.data == [pytest.approx(7.0), pytest.approx(1.0)]


def test_legacy_registry():
    """Test the three-parameter firmware assigns other meanings."""
    mapper = CalibrationMapper(LEGACY_SOIL_TESTER_SENSORS)

    readings = mapper.calibrate({"4102": "21500", "4110": "31000"})

    assert readings.labels == ["Soil Temperature (℃)", "Soil Moisture (%)"]
    assert readings.data == [pytest.approx(21.5), pytest.approx(31.0)]


def test_custom_registry():
    """Test a mapper built from plain descriptors."""
    mapper = CalibrationMapper({"5000": SensorDescriptor("5000", "Light", "lx")})

    assert mapper.calibrate({"5000": "120"}).data == [pytest.approx(120.0)]


def test_registry_is_read_only():
    """Test the built-in registries cannot be modified."""
    with pytest.raises(TypeError):
        SOIL_TESTER_SENSORS["9999"] = SensorDescriptor("9999", "X", "x")


def test_helpers():
    """Test sentinel detection and decimal parsing."""
    assert is_error_sentinel(" O.00 ")
    assert not is_error_sentinel("0")
    assert not is_error_sentinel("0.0")
    assert parse_decimal("24300.0") == 24300.0
    assert parse_decimal("O.00") is None
