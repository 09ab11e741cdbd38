"""
Record Schemas for the Airline Booking App

Each Pydantic model is one record shape inside a stored collection. Attributes
are snake_case in Python and camelCase in storage and over HTTP (e.g.
confirmation_number -> "confirmationNumber"), so existing stores keep working.
"""

from datetime import date
from typing import Annotated, Any, Dict, List, Literal, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

BookingStatus = Literal["confirmed", "cancelled", "completed"]
PaymentType = Literal["credit", "debit", "paypal"]
CardBrand = Literal["visa", "mastercard", "amex", "discover", "paypal"]

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _check_email(value: str) -> str:
    # Validate only; the address is stored exactly as entered
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(str(e))
    return value


Email = Annotated[str, AfterValidator(_check_email)]


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_store(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class User(Record):
    id: str
    first_name: str
    last_name: str
    email: Email


class Credential(User):
    """Stored account row; the only record that carries a password."""
    password: str

    def public(self) -> User:
        return User(**self.model_dump(exclude={"password"}))


class Passenger(Record):
    first_name: str
    last_name: str
    date_of_birth: str = Field(..., description="YYYY-MM-DD")
    nationality: str
    passport_number: str


class BookingCreate(Record):
    user_id: str
    flight_id: str
    flight_number: str
    origin: str
    destination: str
    departure_date: date
    departure_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    arrival_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    seats: List[str] = Field(default_factory=list)
    passengers: List[Passenger] = Field(default_factory=list)
    total_price: float = Field(..., ge=0)
    payment_method_id: Optional[str] = None


class Booking(BookingCreate):
    id: str
    status: BookingStatus = "confirmed"
    booking_date: str
    confirmation_number: str


class BillingAddress(Record):
    street: str
    city: str
    state: str
    zip_code: str
    country: str


class PaymentMethodCreate(Record):
    user_id: str
    type: PaymentType
    cardholder_name: str
    card_number: str = Field("", description="Full number on input, masked once stored")
    expiry_date: str = Field("", description="MM/YY")
    brand: CardBrand
    is_default: bool = False
    billing_address: Optional[BillingAddress] = None


class PaymentMethod(PaymentMethodCreate):
    id: str


class PaymentMethodUpdate(Record):
    """Partial update; only fields that were actually sent are applied."""
    type: Optional[PaymentType] = None
    cardholder_name: Optional[str] = None
    card_number: Optional[str] = None
    expiry_date: Optional[str] = None
    brand: Optional[CardBrand] = None
    is_default: Optional[bool] = None
    billing_address: Optional[BillingAddress] = None


class SearchQuery(Record):
    origin: str
    destination: str
    depart_date: str
    return_date: Optional[str] = None
    passengers: str = Field("1", description="Passenger count as entered in the form")
    cabin_class: str = "economy"
    trip_type: str = "roundtrip"


class SearchHistoryItem(SearchQuery):
    id: str
    search_date: str = Field(..., description="ISO timestamp of the search")
