"""Async HTTP client for the booking screens.

Fetches a dentist's working hours and existing calendar entries, computes the
selectable slots with the shared scheduling module, and submits bookings.

Each call to ``list_slots`` takes a new sequence number. A listing whose
sequence is no longer the latest one (because the user picked another date
while it was loading) reports ``is_stale`` and should be discarded.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

import httpx

from dentalcare.core import config
from dentalcare.scheduling.availability import BusyRange, resolve_available_slots_async
from dentalcare.scheduling.slots import TimeSlot, WorkingHours, generate_slots
from dentalcare.scheduling.time_utils import format_wire_time

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Raised when the backend does not confirm a booking with HTTP 201."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class RequestSequencer:
    def __init__(self) -> None:
        self._latest = 0

    def next(self) -> int:
        self._latest += 1
        return self._latest

    @property
    def latest(self) -> int:
        return self._latest

    def is_current(self, sequence: int) -> bool:
        return sequence == self._latest


@dataclass
class SlotListing:
    dentist_id: str
    day: date
    sequence: int
    slots: List[TimeSlot]
    degraded: bool = False
    _sequencer: Optional[RequestSequencer] = field(default=None, repr=False, compare=False)

    @property
    def is_stale(self) -> bool:
        if self._sequencer is None:
            return False
        return not self._sequencer.is_current(self.sequence)


class BookingClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self._http = httpx.AsyncClient(
            base_url=(base_url or config.BACKEND_URL).rstrip("/"),
            timeout=timeout if timeout is not None else config.HTTP_TIMEOUT_SECONDS,
            headers=headers,
            transport=transport,
        )
        self._sequencer = RequestSequencer()

    async def __aenter__(self) -> "BookingClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def fetch_working_hours(self, dentist_id: str) -> WorkingHours:
        response = await self._http.get(f"/dentists/{dentist_id}/work-info")
        response.raise_for_status()
        info = response.json()
        return WorkingHours.from_strings(
            work_time_from=info.get("work_time_from") or "",
            work_time_to=info.get("work_time_to") or "",
            work_days_from=info.get("work_days_from") or "",
            work_days_to=info.get("work_days_to") or "",
            appointment_duration=info.get("appointment_duration"),
        )

    async def fetch_busy_ranges(
        self,
        dentist_id: str,
        day: date,
        working_hours: Optional[WorkingHours] = None,
    ) -> Tuple[List[BusyRange], List[BusyRange]]:
        """Load the day's appointments and blocks.

        With ``working_hours`` the ranges are placed on that working window,
        matching the timeline of the slots generated from it.
        """
        appointments_response = await self._http.get(
            "/appointments",
            params={"dentist_id": dentist_id, "date": day.isoformat()},
        )
        appointments_response.raise_for_status()
        blocked_response = await self._http.get(
            f"/blocked-dates/dentist/{dentist_id}",
            params={"date": day.isoformat()},
        )
        blocked_response.raise_for_status()

        appointments = [
            BusyRange.from_times(item["time_from"], item["time_to"], client_id=item.get("patient_id"))
            for item in appointments_response.json()
            if item.get("status") != "cancelled"
        ]
        blocked = [
            BusyRange.from_times(item["time_from"], item["time_to"])
            for item in blocked_response.json()
        ]
        if working_hours is not None:
            appointments = [busy_range.on_window(working_hours) for busy_range in appointments]
            blocked = [busy_range.on_window(working_hours) for busy_range in blocked]
        return appointments, blocked

    async def list_slots(self, dentist_id: str, day: date, now: Optional[datetime] = None) -> SlotListing:
        sequence = self._sequencer.next()
        working_hours = await self.fetch_working_hours(dentist_id)
        slots, degraded = await resolve_available_slots_async(
            generate_slots(working_hours, day),
            day,
            lambda: self.fetch_busy_ranges(dentist_id, day, working_hours),
            now or datetime.now(),
        )

        return SlotListing(
            dentist_id=dentist_id,
            day=day,
            sequence=sequence,
            slots=slots,
            degraded=degraded,
            _sequencer=self._sequencer,
        )

    async def book(
        self,
        dentist_id: str,
        patient_id: Optional[str],
        day: date,
        slot: TimeSlot,
        note: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Submit ``slot`` as a new appointment and return the stored record."""
        payload: Dict[str, Any] = {
            "dentist_id": dentist_id,
            "patient_id": patient_id,
            "date": day.isoformat(),
            "time_from": format_wire_time(slot.start),
            "time_to": format_wire_time(slot.end),
        }
        if note:
            payload["note"] = note

        try:
            response = await self._http.post("/appointments", json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Booking request for dentist %s failed: %s", dentist_id, exc)
            raise BookingError("Failed to book appointment. Please try again.") from exc

        if response.status_code != httpx.codes.CREATED:
            detail = _error_detail(response)
            logger.warning("Booking for dentist %s rejected with HTTP %d: %s", dentist_id, response.status_code, detail)
            raise BookingError(
                detail if isinstance(detail, str) else "Failed to book appointment.",
                status_code=response.status_code,
                detail=detail,
            )

        return response.json()


def _error_detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict):
        return body.get("detail") or body.get("error")
    return body
