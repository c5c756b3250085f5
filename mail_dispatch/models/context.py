"""Business details and template context models.

Each dispatch endpoint carries a business details object (booking, payment,
transfer or itinerary) whose fields are interpolated into that endpoint's
email template. Every field is optional: absent values render as
placeholders instead of failing the request.

JSON payloads use camelCase (``bookingId``); snake_case names are accepted
too.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NOT_AVAILABLE = "N/A"
DEFAULT_CUSTOMER_NAME = "Customer"
DEFAULT_SIGNATURE = "Your Travel Team"

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


def _display(value: Any, placeholder: str = NOT_AVAILABLE) -> str:
    """Render a detail value for a template, substituting a placeholder."""
    if value is None:
        return placeholder
    text = str(value).strip()
    return text or placeholder


def safe_filename(name: str) -> str:
    """Strip characters that are unsafe in attachment filenames."""
    return _UNSAFE_FILENAME_CHARS.sub("-", name).strip(" .-") or "attachment"


class BusinessDetails(BaseModel):
    """Base model for the per-operation details objects.

    Attributes:
        customer_name: Customer full name (optional).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    customer_name: str | None = Field(default=None, description="Customer name")

    def to_context(self) -> dict[str, str]:
        """Template variables with placeholders for absent fields."""
        return {"customer_name": _display(self.customer_name, DEFAULT_CUSTOMER_NAME)}


class BookingDetails(BusinessDetails):
    """Details for the booking confirmation email.

    Attributes:
        booking_id: Booking reference.
        booking_date: Date the booking was made or travel starts.
    """

    booking_id: str | None = Field(default=None, description="Booking reference")
    booking_date: str | None = Field(default=None, description="Booking date")

    @property
    def subject(self) -> str:
        return f"Booking Confirmation - {_display(self.booking_id, 'New Booking')}"

    @property
    def attachment_filename(self) -> str:
        return safe_filename(f"itinerary-{_display(self.booking_id, 'booking')}.pdf")

    def to_context(self) -> dict[str, str]:
        return {
            **super().to_context(),
            "booking_id": _display(self.booking_id),
            "booking_date": _display(self.booking_date),
        }


class PaymentDetails(BusinessDetails):
    """Details for the payment receipt email.

    Attributes:
        payment_id: Payment reference.
        amount: Amount paid (number or preformatted string).
        date: Payment date.
        payment_method: How the payment was made (optional).
    """

    payment_id: str | None = Field(default=None, description="Payment reference")
    amount: int | float | str | None = Field(default=None, description="Amount paid")
    date: str | None = Field(default=None, description="Payment date")
    payment_method: str | None = Field(default=None, description="Payment method")

    @property
    def subject(self) -> str:
        return f"Payment Receipt - {_display(self.payment_id, 'Payment')}"

    @property
    def attachment_filename(self) -> str:
        return safe_filename(f"receipt-{_display(self.payment_id, 'payment')}.pdf")

    def to_context(self) -> dict[str, str]:
        return {
            **super().to_context(),
            "payment_id": _display(self.payment_id),
            "amount": _display(self.amount),
            "date": _display(self.date),
            "payment_method": _display(self.payment_method, ""),
        }


class TransferDetails(BusinessDetails):
    """Details for the transfer confirmation email.

    Attributes:
        transfer_id: Transfer reference.
        vehicle_type: Vehicle category (sedan, van, ...).
        vehicle_number: Registration plate.
        pickup_location: Where the customer is picked up.
        drop_location: Where the customer is dropped off.
        date_time: Pickup date and time.
        driver_name: Assigned driver.
        driver_contact: Driver phone number.
    """

    transfer_id: str | None = Field(default=None, description="Transfer reference")
    vehicle_type: str | None = Field(default=None, description="Vehicle type")
    vehicle_number: str | None = Field(default=None, description="Vehicle plate")
    pickup_location: str | None = Field(default=None, description="Pickup location")
    drop_location: str | None = Field(default=None, description="Drop-off location")
    date_time: str | None = Field(default=None, description="Pickup date and time")
    driver_name: str | None = Field(default=None, description="Driver name")
    driver_contact: str | None = Field(default=None, description="Driver contact")

    @property
    def subject(self) -> str:
        return f"Transfer Confirmation - {_display(self.transfer_id, 'Transfer')}"

    @property
    def attachment_filename(self) -> str:
        return safe_filename(f"transfer-{_display(self.transfer_id, 'transfer')}.pdf")

    def to_context(self) -> dict[str, str]:
        return {
            **super().to_context(),
            "transfer_id": _display(self.transfer_id),
            "vehicle_type": _display(self.vehicle_type),
            "vehicle_number": _display(self.vehicle_number),
            "pickup_location": _display(self.pickup_location),
            "drop_location": _display(self.drop_location),
            "date_time": _display(self.date_time),
            "driver_name": _display(self.driver_name),
            "driver_contact": _display(self.driver_contact),
        }


class ItineraryDetails(BusinessDetails):
    """Details for the itinerary delivery email.

    Attributes:
        itinerary_name: Title of the itinerary.
        destination: Trip destination.
        start_date: First day of travel.
        end_date: Last day of travel.
    """

    itinerary_name: str | None = Field(default=None, description="Itinerary title")
    destination: str | None = Field(default=None, description="Trip destination")
    start_date: str | None = Field(default=None, description="Travel start date")
    end_date: str | None = Field(default=None, description="Travel end date")

    @property
    def subject(self) -> str:
        name = _display(self.itinerary_name, "Your Itinerary")
        return f"Your Travel Itinerary: {name}"

    @property
    def attachment_filename(self) -> str:
        name = re.sub(r"\s+", "_", _display(self.itinerary_name, "Travel"))
        return safe_filename(f"{name}_Itinerary.pdf")

    def to_context(self) -> dict[str, str]:
        return {
            **super().to_context(),
            "itinerary_name": _display(self.itinerary_name, "Your Itinerary"),
            "destination": _display(self.destination),
            "start_date": _display(self.start_date),
            "end_date": _display(self.end_date),
        }


class CompanySettings(BaseModel):
    """Company display details used in email sign-offs.

    Loaded from the company settings file and held in the settings cache.

    Attributes:
        name: Company name.
        email: Public contact email.
        phone: Public contact phone.
        address: Postal address.
        website: Company website.
    """

    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("name", "company_name"),
        description="Company name",
    )
    email: str | None = Field(default=None, description="Contact email")
    phone: str | None = Field(default=None, description="Contact phone")
    address: str | None = Field(default=None, description="Postal address")
    website: str | None = Field(default=None, description="Company website")

    def to_context(self) -> dict[str, str]:
        return {
            "company_email": self.email or "",
            "company_phone": self.phone or "",
            "company_address": self.address or "",
            "company_website": self.website or "",
        }
