"""QR payload parsing.

Owner QR codes carry ``FUELQUOTA:<qrIdentifier>:<ownerNic>``.  Rendering
and camera scanning live in the apps; only the decoded text reaches
this module.
"""

from __future__ import annotations

import uuid

from fuelquota._constants import QR_MIN_FIELDS, QR_PREFIX, QR_SEPARATOR
from fuelquota.exceptions import InvalidQrPayloadError
from fuelquota.models._base import FuelQuotaModel


class QrPayload(FuelQuotaModel):
    qr_identifier: str
    owner_nic: str

    @classmethod
    def parse(cls, data: str) -> QrPayload:
        """Parse decoded QR text.

        Raises :class:`InvalidQrPayloadError` when the prefix is missing,
        fewer than three fields are present, or a field is empty.
        """
        if not isinstance(data, str):
            raise InvalidQrPayloadError("QR payload must be a string")
        text = data.strip()
        if not text.startswith(QR_PREFIX + QR_SEPARATOR):
            raise InvalidQrPayloadError(f"QR payload must start with {QR_PREFIX}{QR_SEPARATOR}")
        parts = text.split(QR_SEPARATOR)
        if len(parts) < QR_MIN_FIELDS:
            raise InvalidQrPayloadError(f"QR payload needs {QR_MIN_FIELDS} fields, got {len(parts)}")
        identifier, nic = parts[1].strip(), parts[2].strip()
        if not identifier or not nic:
            raise InvalidQrPayloadError("QR payload has an empty identifier or NIC")
        return cls(qr_identifier=identifier, owner_nic=nic.upper())

    def encode(self) -> str:
        return build_qr_payload(self.qr_identifier, self.owner_nic)


def build_qr_payload(qr_identifier: str, owner_nic: str) -> str:
    return QR_SEPARATOR.join((QR_PREFIX, qr_identifier, owner_nic))


def new_qr_identifier() -> str:
    return str(uuid.uuid4())
