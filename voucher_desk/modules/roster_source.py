"""
Roster Source Module - Student Voucher Desk
Author: Voucher Desk Team
Date: October 2026

This module loads the student roster from the static spreadsheet shipped with
the desk and hands it to whoever subscribed for roster updates.

Features:
- Excel roster ingestion (first sheet by default)
- Configurable column names
- Tolerant row conversion (missing names, float-typed ids)
- Reload with subscriber notification
"""

import logging
import math
import threading
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd


@dataclass(frozen=True)
class StudentRecord:
    """Data structure for a roster entry."""
    id: Union[str, int, None]
    name: Optional[str]
    serial: Union[str, int, None]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _clean_cell(value: Any) -> Any:
    """Normalize a spreadsheet cell: NaN becomes None, 1001.0 becomes 1001."""
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        return value
    if hasattr(value, 'item'):
        # numpy scalars
        return _clean_cell(value.item())
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _as_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class RosterSource:
    """
    Owns the loaded roster and notifies subscribers whenever it is replaced.
    The roster itself is never mutated in place, so a reference handed out
    stays valid.
    """

    def __init__(self, path: Union[str, Path, None] = None, sheet_name: Union[str, int] = 0,
                 id_column: str = 'StudentId', name_column: str = 'Student Name',
                 serial_column: str = 'SNo'):
        """
        Initialize the roster source.

        Args:
            path: Location of the roster spreadsheet
            sheet_name: Sheet index or name to read
            id_column: Column holding the student id
            name_column: Column holding the student name
            serial_column: Column holding the serial number
        """
        self.path = Path(path) if path else None
        self.sheet_name = sheet_name
        self.columns = {
            'id': id_column,
            'name': name_column,
            'serial': serial_column
        }
        self.logger = logging.getLogger(__name__)

        self._records: Tuple[StudentRecord, ...] = ()
        self._subscribers: List[Callable[[Tuple[StudentRecord, ...]], None]] = []
        self._lock = threading.Lock()
        # Serializes replacements so subscribers see rosters in swap order
        self._replace_lock = threading.Lock()

    @property
    def records(self) -> Tuple[StudentRecord, ...]:
        return self._records

    def subscribe(self, callback: Callable[[Tuple[StudentRecord, ...]], None]) -> Callable[[], None]:
        """
        Register a callback invoked with the new roster after every replacement.

        Returns:
            Callable that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def replace(self, records: Sequence[StudentRecord]) -> None:
        """Swap in a new roster and notify subscribers."""
        new_records = tuple(records)
        with self._replace_lock:
            with self._lock:
                self._records = new_records
                subscribers = list(self._subscribers)

            for callback in subscribers:
                try:
                    callback(new_records)
                except Exception as e:
                    self.logger.error(f"Roster subscriber failed: {str(e)}")

    def load(self) -> Dict[str, Any]:
        """
        Read the roster spreadsheet and replace the current roster.

        On failure the previous roster is left untouched.

        Returns:
            Dict[str, Any]: Load result
        """
        if self.path is None:
            return {
                'success': False,
                'error': 'No roster path configured'
            }

        try:
            frame = pd.read_excel(self.path, sheet_name=self.sheet_name)
            records = self.records_from_frame(frame)
            self.replace(records)

            self.logger.info(f"Roster loaded from {self.path}: {len(records)} students")
            return {
                'success': True,
                'count': len(records),
                'path': str(self.path)
            }

        except Exception as e:
            self.logger.error(f"Roster load failed for {self.path}: {str(e)}")
            return {
                'success': False,
                'error': str(e)
            }

    def records_from_frame(self, frame: pd.DataFrame) -> List[StudentRecord]:
        """
        Convert spreadsheet rows into student records.

        Missing columns yield None fields; such rows are kept and simply
        never match on the missing field.
        """
        missing = [col for col in self.columns.values() if col not in frame.columns]
        if missing:
            self.logger.warning(f"Roster is missing columns: {', '.join(missing)}")

        records = []
        for row in frame.to_dict(orient='records'):
            records.append(StudentRecord(
                id=_clean_cell(row.get(self.columns['id'])),
                name=_as_text(_clean_cell(row.get(self.columns['name']))),
                serial=_clean_cell(row.get(self.columns['serial']))
            ))

        return records

    def find_by_id(self, student_id: Union[str, int]) -> Optional[StudentRecord]:
        """Look up a record by its stringified id."""
        wanted = str(student_id).strip()
        for record in self._records:
            if record.id is not None and str(record.id) == wanted:
                return record
        return None
