import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

from codes import generate_confirmation_number, timestamp_id
from database import BOOKINGS, Repository
from errors import NotFoundError, StorageUnavailableError
from schemas import Booking, BookingCreate

logger = logging.getLogger(__name__)

CHECK_IN_WINDOW = timedelta(hours=24)

DEFAULT_PASSENGER: Dict[str, str] = {
    "firstName": "John",
    "lastName": "Doe",
    "dateOfBirth": "1990-01-01",
    "nationality": "United States",
    "passportNumber": "AB123456",
}


# --------- Demo data ---------
def demo_bookings(today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Sample rows shown to the first user of an empty store."""
    today = today or date.today()
    return [
        {
            "id": "booking-demo-1",
            "flightId": "FL-JFK-LAX-1",
            "flightNumber": "FD 101",
            "origin": "JFK",
            "destination": "LAX",
            "departureDate": (today + timedelta(days=14)).isoformat(),
            "departureTime": "08:30",
            "arrivalTime": "11:45",
            "seats": ["12A", "12B"],
            "passengers": [],
            "totalPrice": 658.0,
            "status": "confirmed",
            "bookingDate": (today - timedelta(days=3)).isoformat(),
        },
        {
            "id": "booking-demo-2",
            "flightId": "FL-SFO-ORD-7",
            "flightNumber": "FD 207",
            "origin": "SFO",
            "destination": "ORD",
            "departureDate": (today - timedelta(days=30)).isoformat(),
            "departureTime": "14:10",
            "arrivalTime": "20:05",
            "seats": ["7C"],
            "passengers": [],
            "totalPrice": 312.5,
            "status": "completed",
            "bookingDate": (today - timedelta(days=60)).isoformat(),
        },
        {
            "id": "booking-demo-3",
            "flightId": "FL-BOS-MIA-3",
            "flightNumber": "FD 318",
            "origin": "BOS",
            "destination": "MIA",
            "departureDate": (today + timedelta(days=40)).isoformat(),
            "departureTime": "06:55",
            "arrivalTime": "10:20",
            "seats": ["21F"],
            "passengers": [],
            "totalPrice": 189.0,
            "status": "cancelled",
            "bookingDate": (today - timedelta(days=10)).isoformat(),
        },
    ]


def _seed(rows: List[Dict[str, Any]], user_id: str) -> List[Booking]:
    seeded = []
    codes = set()
    for row in demo_bookings():
        code = generate_confirmation_number(codes)
        codes.add(code)
        booking = Booking(
            **{
                **row,
                "userId": user_id,
                "confirmationNumber": code,
                "passengers": row["passengers"] or [dict(DEFAULT_PASSENGER)],
            }
        )
        rows.append(booking.to_store())
        seeded.append(booking)
    logger.info("Seeded %d demo bookings for user %s", len(seeded), user_id)
    return seeded


# --------- Accessors ---------
def _user_bookings(repo: Repository, user_id: str) -> List[Booking]:
    rows = repo.read(BOOKINGS)
    if not rows and repo.seed_demo_bookings:
        with repo.collection(BOOKINGS) as rows:
            if not rows:
                return _seed(rows, user_id)
    return [Booking(**row) for row in rows if row.get("userId") == user_id]


def _create(repo: Repository, data: BookingCreate) -> Booking:
    with repo.collection(BOOKINGS) as rows:
        booking = Booking(
            **data.model_dump(),
            id=timestamp_id("booking-"),
            booking_date=date.today().isoformat(),
            status="confirmed",
            confirmation_number=generate_confirmation_number(
                {row.get("confirmationNumber") for row in rows}
            ),
        )
        rows.append(booking.to_store())
    return booking


def _cancel(repo: Repository, booking_id: str) -> Booking:
    with repo.collection(BOOKINGS) as rows:
        for row in rows:
            if row.get("id") == booking_id:
                row["status"] = "cancelled"
                return Booking(**row)
        raise NotFoundError("Booking", booking_id)


def _find(repo: Repository, booking_id: str) -> Optional[Booking]:
    for row in repo.read(BOOKINGS):
        if row.get("id") == booking_id:
            return Booking(**row)
    return None


async def get_user_bookings(repo: Repository, user_id: str) -> List[Booking]:
    if not repo.available:
        return []
    await repo.pause("get_user_bookings")
    return await repo.run(_user_bookings, repo, user_id)


async def create_booking(repo: Repository, data: BookingCreate) -> Booking:
    if not repo.available:
        logger.warning("create_booking refused: no storage")
        raise StorageUnavailableError("Cannot create booking without storage")
    await repo.pause("create_booking")

    booking = await repo.run(_create, repo, data)
    logger.info("Created booking %s (%s) for user %s", booking.id, booking.confirmation_number, booking.user_id)
    return booking


async def cancel_booking(repo: Repository, booking_id: str) -> Booking:
    if not repo.available:
        logger.warning("cancel_booking refused: no storage")
        raise StorageUnavailableError("Cannot cancel booking without storage")
    await repo.pause("cancel_booking")

    booking = await repo.run(_cancel, repo, booking_id)
    logger.info("Cancelled booking %s", booking_id)
    return booking


async def get_booking(repo: Repository, booking_id: str) -> Optional[Booking]:
    if not repo.available:
        return None
    await repo.pause("get_booking")
    return await repo.run(_find, repo, booking_id)


# --------- Read-time views ---------
def split_bookings(bookings: List[Booking], today: Optional[date] = None) -> Tuple[List[Booking], List[Booking]]:
    """
    Split into (upcoming, past). A confirmed booking whose departure date has
    passed counts as completed even though its stored status is unchanged.
    Cancelled future bookings are in neither list.
    """
    today = today or date.today()
    upcoming, past = [], []
    for booking in bookings:
        if booking.status == "confirmed" and booking.departure_date > today:
            upcoming.append(booking)
        elif booking.status == "completed" or booking.departure_date <= today:
            past.append(booking)
    return upcoming, past


def check_in_eligible(bookings: List[Booking], now: Optional[datetime] = None) -> List[Booking]:
    """Confirmed bookings departing within the next 24 hours."""
    now = now or datetime.now()
    eligible = []
    for booking in bookings:
        if booking.status != "confirmed":
            continue
        departs = datetime.combine(booking.departure_date, time.fromisoformat(booking.departure_time))
        remaining = departs - now
        if timedelta(0) < remaining <= CHECK_IN_WINDOW:
            eligible.append(booking)
    return eligible
