"""Customer, vehicle, trade-in, and lender records for a sales session."""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    """Base for session records: camelCase keys on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())

    def flatten(self, prefix: str = "") -> dict[str, str]:
        """Export non-empty values keyed by camelCase name, optionally prefixed."""
        return {
            f"{prefix}{key}": str(value)
            for key, value in self.model_dump(by_alias=True).items()
            if value
        }


class CustomerInfo(_Record):
    """Contact details of the customer under conversation."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    email: Optional[str] = None
    home_phone: Optional[str] = None
    cell_phone: Optional[str] = None


class VehicleInfo(_Record):
    """The vehicle being sold."""

    vin: Optional[str] = None
    stock_number: Optional[str] = None
    year: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    miles: Optional[str] = None


class TradeInInfo(_Record):
    """The customer's trade-in vehicle."""

    vin: Optional[str] = None
    year: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    miles: Optional[str] = None


class LenderInfo(_Record):
    """Lienholder on an unpaid trade-in."""

    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    account_number: Optional[str] = None
    payoff_amount: Optional[str] = None
    per_diem_amount: Optional[str] = None
