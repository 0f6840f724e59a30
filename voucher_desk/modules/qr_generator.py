"""
QR Code Generator Module - Student Voucher Desk
Author: Voucher Desk Team
Date: October 2026

Builds the QR token printed at the bottom of each voucher so the certificate
desk can scan it instead of typing the student id.
"""

import hashlib
import json
import logging
from typing import Any, Dict, Optional

import qrcode
from PIL import Image

from voucher_desk.modules.roster_source import StudentRecord

ERROR_CORRECTION = {
    'L': qrcode.constants.ERROR_CORRECT_L,
    'M': qrcode.constants.ERROR_CORRECT_M,
    'Q': qrcode.constants.ERROR_CORRECT_Q,
    'H': qrcode.constants.ERROR_CORRECT_H
}


class QRGenerator:
    """QR code generator for voucher tokens."""

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        """
        Initialize the generator.

        Args:
            settings: Overrides for version, error_correction ('L'/'M'/'Q'/'H'),
                box_size, border, fill_color and back_color
        """
        self.logger = logging.getLogger(__name__)

        self.settings = {
            'version': 1,
            'error_correction': 'M',
            'box_size': 10,
            'border': 4,
            'fill_color': 'black',
            'back_color': 'white'
        }
        if settings:
            self.settings.update(settings)

    @staticmethod
    def checksum(student_id: str, serial: str) -> str:
        return hashlib.sha256(f"{student_id}:{serial}".encode()).hexdigest()[:16]

    def build_payload(self, record: StudentRecord) -> str:
        """
        Create the JSON payload encoded in the voucher QR code.

        Args:
            record (StudentRecord): Selected student

        Returns:
            str: Compact JSON string
        """
        student_id = '' if record.id is None else str(record.id)
        serial = '' if record.serial is None else str(record.serial)

        token_data = {
            'student_id': student_id,
            'serial': serial,
            'type': 'voucher',
            'checksum': self.checksum(student_id, serial)
        }
        return json.dumps(token_data, sort_keys=True, separators=(',', ':'))

    def make_image(self, record: StudentRecord) -> Image.Image:
        """
        Render the voucher QR code as a PIL image.

        Raises:
            ValueError: If the record has no id
        """
        if record.id is None:
            raise ValueError("Cannot build a voucher QR code without a student id")

        qr = qrcode.QRCode(
            version=self.settings['version'],
            error_correction=ERROR_CORRECTION.get(self.settings['error_correction'],
                                                  qrcode.constants.ERROR_CORRECT_M),
            box_size=self.settings['box_size'],
            border=self.settings['border']
        )
        qr.add_data(self.build_payload(record))
        qr.make(fit=True)

        img = qr.make_image(
            fill_color=self.settings['fill_color'],
            back_color=self.settings['back_color']
        )

        self.logger.debug(f"Voucher QR code generated for student {record.id}")
        # qrcode wraps the PIL image; hand the plain image to callers
        return img.get_image() if hasattr(img, 'get_image') else img
