"""
Log Client Module - Student Voucher Desk
Author: Voucher Desk Team
Date: October 2026

This module talks to the remote logging service that owns the attendance and
voucher log. The desk never stores events itself: every download, print and
attendance mark is posted to the service, and counts are read back from it.

Features:
- Synchronous event posting with result dicts
- Fire-and-forget posting through a background worker queue
- Attendance marking
- Recent log and attendance summary retrieval
"""

import logging
import threading
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from queue import Full, Queue
from typing import Any, Dict, Optional

import requests

from voucher_desk.modules.roster_source import StudentRecord

EVENT_TYPES = {
    'DOWNLOAD': 'voucher_download',
    'PRINT': 'voucher_print',
    'ATTENDANCE': 'attendance'
}


@dataclass
class LogEvent:
    """Data structure for an event posted to the log service."""
    event: str
    student_id: Optional[str]
    student_name: Optional[str]
    serial: Optional[str]
    created_at: str

    @classmethod
    def for_record(cls, event: str, record: StudentRecord) -> 'LogEvent':
        return cls(
            event=event,
            student_id=None if record.id is None else str(record.id),
            student_name=record.name,
            serial=None if record.serial is None else str(record.serial),
            created_at=datetime.now(timezone.utc).isoformat()
        )


class LogClient:
    """
    REST client for the remote log service.
    Failures are logged and reported in the result dict; nothing is retried.
    """

    def __init__(self, base_url: Optional[str], api_key: Optional[str] = None,
                 timeout: float = 10, queue_size: int = 1000,
                 session: Optional[requests.Session] = None):
        """
        Initialize the client and start the background sender.

        Args:
            base_url: Root URL of the log service; None disables the client
            api_key: Sent as a bearer token when set
            timeout: Per-request timeout in seconds
            queue_size: Capacity of the fire-and-forget queue
            session: Session to send requests with
        """
        self.logger = logging.getLogger(__name__)
        self.base_url = base_url.rstrip('/') if base_url else None
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})
        if api_key:
            self.session.headers.update({'Authorization': f"Bearer {api_key}"})

        self.event_queue: Queue = Queue(maxsize=queue_size)
        self.sender = threading.Thread(
            target=self._process_events,
            name='log-client-sender',
            daemon=True
        )
        self.sender.start()

        if self.base_url:
            self.logger.info(f"Log client initialized for {self.base_url}")
        else:
            self.logger.warning("Log API URL not configured; remote logging disabled")

    @property
    def enabled(self) -> bool:
        return self.base_url is not None

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self.enabled:
            return {
                'success': False,
                'error': 'Log API not configured'
            }

        try:
            response = self.session.request(method, self._url(path),
                                            timeout=self.timeout, **kwargs)
            response.raise_for_status()
            data = response.json() if response.content else None
            return {
                'success': True,
                'data': data
            }

        except requests.exceptions.RequestException as e:
            self.logger.error(f"Log API {method} {path} failed: {str(e)}")
            return {
                'success': False,
                'error': str(e)
            }
        except ValueError as e:
            self.logger.error(f"Log API {method} {path} returned invalid JSON: {str(e)}")
            return {
                'success': False,
                'error': 'Invalid response from log service'
            }

    def post_event(self, event_type: str, record: StudentRecord) -> Dict[str, Any]:
        """
        Post one event and wait for the service to acknowledge it.

        Args:
            event_type (str): One of EVENT_TYPES values
            record (StudentRecord): Student the event is about

        Returns:
            Dict[str, Any]: Request result
        """
        event = LogEvent.for_record(event_type, record)
        result = self._request('POST', '/logs', json=asdict(event))

        if result['success']:
            self.logger.info(f"Logged {event_type} for student {event.student_id}")
        return result

    def post_event_async(self, event_type: str, record: StudentRecord) -> bool:
        """
        Queue an event for the background sender.

        Returns:
            bool: False when the client is disabled or the queue is full
        """
        if not self.enabled:
            return False

        try:
            self.event_queue.put_nowait((event_type, record))
            return True
        except Full:
            self.logger.warning(f"Log queue full; dropped {event_type} for student {record.id}")
            return False

    def mark_attendance(self, record: StudentRecord) -> Dict[str, Any]:
        """Record the student as present at the ceremony."""
        return self.post_event(EVENT_TYPES['ATTENDANCE'], record)

    def fetch_logs(self, limit: int = 20) -> Dict[str, Any]:
        """Fetch the most recent events from the log service."""
        return self._request('GET', '/logs', params={'limit': limit})

    def fetch_attendance_summary(self) -> Dict[str, Any]:
        """Fetch aggregate attendance counts."""
        return self._request('GET', '/attendance/summary')

    def _process_events(self) -> None:
        """Background thread draining the fire-and-forget queue."""
        while True:
            item = self.event_queue.get()
            try:
                if item is None:  # Shutdown signal
                    break

                event_type, record = item
                self.post_event(event_type, record)

            except Exception as e:
                self.logger.error(f"Error sending queued log event: {str(e)}")
            finally:
                self.event_queue.task_done()

    def flush(self) -> None:
        """Block until every queued event has been sent (or failed)."""
        self.event_queue.join()

    def shutdown(self) -> None:
        """Stop the background sender and close the HTTP session."""
        try:
            self.event_queue.put(None)
            if self.sender.is_alive():
                self.sender.join(timeout=5)
            self.session.close()
            self.logger.info("Log client shut down")

        except Exception as e:
            self.logger.error(f"Error during log client shutdown: {str(e)}")
