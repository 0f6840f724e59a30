"""
Voucher Renderer Module - Student Voucher Desk
Author: Voucher Desk Team
Date: October 2026

This module renders the printable identity voucher for a selected student.
The layout targets 80 mm thermal printers: a fixed 80 x 100 mm portrait page
with centred Courier text, two rules and an optional QR token.

Features:
- Fixed-layout thermal voucher (PDF)
- Configurable event and ceremony titles
- Optional QR token for certificate collection
- Download and print variants sharing one layout
"""

import io
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from voucher_desk.modules.qr_generator import QRGenerator
from voucher_desk.modules.roster_source import StudentRecord

PAGE_WIDTH_MM = 80
PAGE_HEIGHT_MM = 100
RULE_LEFT_MM = 5
RULE_RIGHT_MM = 75
QR_SIZE_MM = 26


class VoucherRenderer:
    """
    Turns a student record into a voucher PDF.
    Vertical positions are tracked in millimetres from the top of the page.
    """

    def __init__(self, event_name: str = 'Bano Qabil 3.0',
                 ceremony_name: str = 'Graduation Ceremony',
                 include_qr: bool = True,
                 qr_generator: Optional[QRGenerator] = None):
        """
        Initialize the renderer.

        Args:
            event_name: First title line and thank-you line
            ceremony_name: Second title line
            include_qr: Draw a QR token below the text
            qr_generator: Generator used for the QR token
        """
        self.logger = logging.getLogger(__name__)
        self.event_name = event_name
        self.ceremony_name = ceremony_name
        self.include_qr = include_qr
        self.qr_generator = qr_generator or QRGenerator()

        self.page_size = (PAGE_WIDTH_MM * mm, PAGE_HEIGHT_MM * mm)

    @staticmethod
    def filename_for(record: StudentRecord) -> str:
        return f"voucher_{record.id}.pdf"

    def _centre(self, pdf: canvas.Canvas, text: str, y_mm: float) -> None:
        pdf.drawCentredString(self.page_size[0] / 2, (PAGE_HEIGHT_MM - y_mm) * mm, text)

    def _rule(self, pdf: canvas.Canvas, y_mm: float) -> None:
        y = (PAGE_HEIGHT_MM - y_mm) * mm
        pdf.line(RULE_LEFT_MM * mm, y, RULE_RIGHT_MM * mm, y)

    def _body_lines(self, record: StudentRecord):
        serial = '' if record.serial is None else record.serial
        name = record.name or ''
        return [
            f"Student ID: {record.id}",
            f"Name: {name}",
            f"Serial No: S-{serial}"
        ]

    def render(self, record: StudentRecord) -> bytes:
        """
        Render the voucher and return the PDF bytes.

        Raises:
            ValueError: If the record has no id
        """
        if record is None or record.id is None:
            raise ValueError("A student with an id is required to render a voucher")

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=self.page_size)
        pdf.setTitle(f"Voucher {record.id}")
        pdf.setAuthor(self.event_name)

        y = 10
        pdf.setFont('Courier-Bold', 10)
        self._centre(pdf, self.event_name, y)
        y += 5
        self._centre(pdf, self.ceremony_name, y)
        y += 6

        pdf.setFont('Courier', 10)
        self._rule(pdf, y)
        y += 4

        id_line, name_line, serial_line = self._body_lines(record)
        self._centre(pdf, id_line, y)
        y += 5
        self._centre(pdf, name_line, y)
        y += 5
        self._centre(pdf, serial_line, y)
        y += 6

        self._rule(pdf, y)
        y += 4

        pdf.setFont('Courier-Oblique', 10)
        for line in ('Please keep this token safe.', 'It is required to collect'):
            self._centre(pdf, line, y)
            y += 4
        self._centre(pdf, 'your certificate.', y)
        y += 6

        pdf.setFont('Courier-Bold', 10)
        self._centre(pdf, 'Thanks for being part of', y)
        y += 4
        self._centre(pdf, f"{self.event_name}!", y)
        y += 2

        if self.include_qr:
            self._draw_qr(pdf, record, y + 2)

        pdf.showPage()
        pdf.save()

        self.logger.info(f"Voucher rendered for student {record.id}")
        return buffer.getvalue()

    def _draw_qr(self, pdf: canvas.Canvas, record: StudentRecord, top_mm: float) -> None:
        size = min(QR_SIZE_MM, PAGE_HEIGHT_MM - top_mm - 2)
        if size <= 0:
            return

        image = self.qr_generator.make_image(record)
        x = (PAGE_WIDTH_MM - size) / 2 * mm
        y = (PAGE_HEIGHT_MM - top_mm - size) * mm
        pdf.drawImage(ImageReader(image), x, y, width=size * mm, height=size * mm)

    def generate_voucher(self, record: Optional[StudentRecord]) -> Dict[str, Any]:
        """
        Render a voucher and wrap the outcome in a result dict.

        Returns:
            Dict[str, Any]: success, content, filename, generated_at or error
        """
        if record is None:
            return {
                'success': False,
                'error': 'No student selected'
            }

        try:
            content = self.render(record)
            return {
                'success': True,
                'content': content,
                'filename': self.filename_for(record),
                'size': len(content),
                'generated_at': datetime.now().isoformat()
            }

        except Exception as e:
            self.logger.error(f"Voucher generation failed for {record.id}: {str(e)}")
            return {
                'success': False,
                'error': str(e)
            }
