from __future__ import annotations

from fuelquota._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "vehicleId": "v1",
        "qrData": "FUELQUOTA:abc:123456789V",
        "Authorization": "Bearer jwt",
        "owner": {"ownerNic": "123456789V", "name": "A. Perera"},
        "password": "pw",
    }

    redacted = redact_for_log(payload)
    assert redacted["vehicleId"] == "v1"
    assert redacted["qrData"] == "<redacted>"
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["owner"]["ownerNic"] == "<redacted>"
    assert redacted["owner"]["name"] == "A. Perera"
    assert redacted["password"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"notes": long_value}, max_string=10)
    assert redacted["notes"].startswith("x" * 10)
    assert "<truncated>" in redacted["notes"]


def test_redact_for_log_walks_lists() -> None:
    redacted = redact_for_log([{"token": "t"}, 3, b"\x00\x01"])
    assert redacted == [{"token": "<redacted>"}, 3, "<bytes:2b>"]


def test_redact_for_log_hides_qr_code_key_used_by_scan() -> None:
    redacted = redact_for_log({"qrCode": "FUELQUOTA:abc:123456789V"})
    assert redacted == {"qrCode": "<redacted>"}


def test_redact_for_log_hides_qr_payload_under_any_key() -> None:
    redacted = redact_for_log({"remarks": "FUELQUOTA:abc:123456789V", "items": ["FUELQUOTA:x:199012345678"]})
    assert redacted["remarks"] == "<redacted>"
    assert redacted["items"] == ["<redacted>"]
    assert "123456789V" not in str(redacted)
