from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

MealPreference = Literal["halal", "vegetarian", "no-pork", "special"]
PaymentStatus = Literal["pending", "completed", "failed"]


class Trip(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    agency_name: str = ""
    description: str = ""
    price: float                 # decimal currency units (EUR)
    departure_date: date
    return_date: date
    available_spots: int = 0
    image_url: Optional[str] = None
    includes: List[str] = Field(default_factory=list)


class CustomerContact(BaseModel):
    """Step 1 of the wizard."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    passport_number: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class TravelOptions(BaseModel):
    """Step 2 of the wizard."""

    travel_insurance: bool = False
    meal_preference: Optional[MealPreference] = "halal"
    special_requests: str = ""


class PaymentDetails(BaseModel):
    """Step 4 of the wizard. Collected but never sent to a payment network."""

    card_number: str = ""
    card_expiry: str = ""
    card_cvc: str = ""
    card_name: str = ""


class WizardData(BaseModel):
    contact: CustomerContact = Field(default_factory=CustomerContact)
    options: TravelOptions = Field(default_factory=TravelOptions)
    payment: PaymentDetails = Field(default_factory=PaymentDetails)


class Customer(CustomerContact):
    model_config = ConfigDict(from_attributes=True)

    id: str


class Booking(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    booking_reference: str
    customer_id: str
    trip_id: str
    travel_insurance: bool = False
    meal_preference: MealPreference
    special_requests: Optional[str] = None
    total_price: float
    payment_status: PaymentStatus = "pending"
    payment_id: Optional[str] = None


class ConfirmationPayload(BaseModel):
    """JSON body accepted by the confirmation collaborator (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    booking_reference: str = Field(alias="bookingReference")
    customer_email: str = Field(alias="customerEmail")
    customer_name: str = Field(alias="customerName")
    trip_name: str = Field(alias="tripName")
    departure_date: date = Field(alias="departureDate")
    return_date: date = Field(alias="returnDate")
    total_price: float = Field(alias="totalPrice")
    travel_insurance: bool = Field(alias="travelInsurance")
    meal_preference: str = Field(alias="mealPreference")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class NotificationAck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    booking_reference: Optional[str] = Field(default=None, alias="bookingReference")
