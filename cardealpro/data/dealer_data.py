"""
Dealership catalog: sales scenarios, documents, field definitions, and the
default PDF field-name mapping.

This is the single source of truth for which documents a scenario needs,
which fields are required, and what each field is called inside each form.
"""

import re

from cardealpro.schemas.catalog_schema import (
    DocumentDefinition,
    FieldDefinition,
    ScenarioDefinition,
    ScenarioFeatures,
    requires_trade_in,
    requires_unpaid_trade,
)

CUSTOMER = "customer"
VEHICLE = "vehicle"
TRADE_IN = "tradeIn"
LENDER = "lender"

# Flattened form-data key prefix for each record namespace
NAMESPACE_PREFIXES: dict[str, str] = {
    VEHICLE: "vehicle_",
    TRADE_IN: "tradeIn_",
    LENDER: "lender_",
}

_NAME = re.compile(r"[A-Za-z\s\-']+")
_CITY = re.compile(r"[A-Za-z\s\-'.]+")
_STATE = re.compile(r"[A-Z]{2}")
_ZIP = re.compile(r"\d{5}(-\d{4})?")
_EMAIL = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_PHONE = re.compile(r"\(\d{3}\) \d{3}-\d{4}")
_VIN = re.compile(r"[A-HJ-NPR-Z0-9]{17}")
_YEAR = re.compile(r"\d{4}")
_DIGITS = re.compile(r"\d+")
_MONEY = re.compile(r"\$?[\d,]+(\.\d{2})?")


DOCUMENTS: dict[str, DocumentDefinition] = {
    "deal-check-list": DocumentDefinition(
        id="deal-check-list",
        name="Deal Check List",
        description="Comprehensive checklist for all deal components",
        sections=("customer-info", "vehicle-info", "trade-in-info"),
    ),
    "delivery-report": DocumentDefinition(
        id="delivery-report",
        name="Delivery Report",
        description="Details the vehicle delivery to customer",
        sections=("customer-info", "vehicle-info"),
    ),
    "privacy-policy": DocumentDefinition(
        id="privacy-policy",
        name="Privacy Policy",
        description="Explains how customer data is handled",
        sections=("customer-info",),
    ),
    "oil-change-intervals": DocumentDefinition(
        id="oil-change-intervals",
        name="Oil Change Intervals",
        description="Information about recommended service intervals",
        sections=("vehicle-info",),
    ),
    "payoff-authorization": DocumentDefinition(
        id="payoff-authorization",
        name="Payoff Authorization Sheet",
        description="Authorization for paying off the trade-in vehicle",
        sections=("customer-info", "trade-in-info", "lender-info"),
    ),
}

_NEW_DOCS = ("deal-check-list", "delivery-report", "privacy-policy", "oil-change-intervals")
_USED_DOCS = ("deal-check-list", "delivery-report", "privacy-policy")

SCENARIOS: list[ScenarioDefinition] = [
    ScenarioDefinition(
        id="new-no-trade",
        name="New Car with No Trade-in",
        required_documents=_NEW_DOCS,
        features=ScenarioFeatures(),
    ),
    ScenarioDefinition(
        id="new-paid-trade",
        name="New Car with Paid-Off Trade-in",
        required_documents=_NEW_DOCS,
        features=ScenarioFeatures(has_trade_in=True),
    ),
    ScenarioDefinition(
        id="new-unpaid-trade",
        name="New Car with Unpaid Trade-in",
        required_documents=_NEW_DOCS + ("payoff-authorization",),
        features=ScenarioFeatures(has_trade_in=True, trade_is_unpaid=True),
    ),
    ScenarioDefinition(
        id="used-no-trade",
        name="Used Car with No Trade-in",
        required_documents=_USED_DOCS,
        features=ScenarioFeatures(),
    ),
    ScenarioDefinition(
        id="used-paid-trade",
        name="Used Car with Paid-Off Trade-in",
        required_documents=_USED_DOCS,
        features=ScenarioFeatures(has_trade_in=True),
    ),
    ScenarioDefinition(
        id="used-unpaid-trade",
        name="Used Car with Unpaid Trade-in",
        required_documents=_USED_DOCS + ("payoff-authorization",),
        features=ScenarioFeatures(has_trade_in=True, trade_is_unpaid=True),
    ),
]


FIELD_DEFINITIONS: list[FieldDefinition] = [
    # --- Customer ---
    FieldDefinition(
        id="firstName",
        display_name="First Name",
        record_path=(CUSTOMER, "first_name"),
        required=True,
        validation=_NAME,
        document_mapping={
            "deal-check-list": "Customer First Name",
            "delivery-report": "NAME_FIRST",
            "privacy-policy": "First Name",
            "payoff-authorization": "CUSTOMER'S FIRST NAME",
        },
    ),
    FieldDefinition(
        id="lastName",
        display_name="Last Name",
        record_path=(CUSTOMER, "last_name"),
        required=True,
        validation=_NAME,
        document_mapping={
            "deal-check-list": "Customer Last Name",
            "delivery-report": "NAME_LAST",
            "privacy-policy": "Last Name",
            "payoff-authorization": "CUSTOMER'S LAST NAME",
        },
    ),
    FieldDefinition(
        id="streetAddress",
        display_name="Street Address",
        record_path=(CUSTOMER, "street_address"),
        required=True,
        document_mapping={
            "deal-check-list": "Street Address",
            "delivery-report": "ADDRESS",
            "privacy-policy": "Street Address",
            "payoff-authorization": "STREET ADDRESS",
        },
    ),
    FieldDefinition(
        id="city",
        display_name="City",
        record_path=(CUSTOMER, "city"),
        required=True,
        validation=_CITY,
        document_mapping={
            "deal-check-list": "City",
            "delivery-report": "CITY",
            "privacy-policy": "City",
            "payoff-authorization": "CITY",
        },
    ),
    FieldDefinition(
        id="state",
        display_name="State",
        record_path=(CUSTOMER, "state"),
        required=True,
        validation=_STATE,
        document_mapping={
            "deal-check-list": "State",
            "delivery-report": "STATE",
            "privacy-policy": "State",
            "payoff-authorization": "STATE",
        },
    ),
    FieldDefinition(
        id="zipCode",
        display_name="ZIP Code",
        record_path=(CUSTOMER, "zip_code"),
        required=True,
        validation=_ZIP,
        document_mapping={
            "deal-check-list": "ZIP",
            "delivery-report": "ZIP",
            "privacy-policy": "ZIP Code",
            "payoff-authorization": "ZIP",
        },
    ),
    FieldDefinition(
        id="email",
        display_name="Email Address",
        record_path=(CUSTOMER, "email"),
        required=True,
        validation=_EMAIL,
        document_mapping={
            "deal-check-list": "Email",
            "delivery-report": "EMAIL",
            "privacy-policy": "Email Address",
        },
    ),
    FieldDefinition(
        id="homePhone",
        display_name="Home Phone",
        record_path=(CUSTOMER, "home_phone"),
        required=False,
        validation=_PHONE,
        document_mapping={
            "deal-check-list": "Home Phone",
            "delivery-report": "PHONE_HOME",
            "privacy-policy": "Home Phone",
        },
    ),
    FieldDefinition(
        id="cellPhone",
        display_name="Cell Phone",
        record_path=(CUSTOMER, "cell_phone"),
        required=True,
        validation=_PHONE,
        document_mapping={
            "deal-check-list": "Cell Phone",
            "delivery-report": "PHONE_CELL",
            "privacy-policy": "Mobile Phone",
            "payoff-authorization": "PHONE",
        },
    ),
    # --- Vehicle ---
    FieldDefinition(
        id="vehicleVin",
        display_name="VIN",
        record_path=(VEHICLE, "vin"),
        required=True,
        validation=_VIN,
        document_mapping={
            "deal-check-list": "VIN",
            "delivery-report": "VEHICLE_VIN",
            "oil-change-intervals": "VIN",
        },
    ),
    FieldDefinition(
        id="stockNumber",
        display_name="Stock Number",
        record_path=(VEHICLE, "stock_number"),
        required=True,
        document_mapping={
            "deal-check-list": "Stock #",
            "delivery-report": "STOCK_NUM",
        },
    ),
    FieldDefinition(
        id="vehicleYear",
        display_name="Year",
        record_path=(VEHICLE, "year"),
        required=True,
        validation=_YEAR,
        document_mapping={
            "deal-check-list": "Year",
            "delivery-report": "VEHICLE_YEAR",
            "oil-change-intervals": "Year",
        },
    ),
    FieldDefinition(
        id="vehicleMake",
        display_name="Make",
        record_path=(VEHICLE, "make"),
        required=True,
        document_mapping={
            "deal-check-list": "Make",
            "delivery-report": "VEHICLE_MAKE",
            "oil-change-intervals": "Make",
        },
    ),
    FieldDefinition(
        id="vehicleModel",
        display_name="Model",
        record_path=(VEHICLE, "model"),
        required=True,
        document_mapping={
            "deal-check-list": "Model",
            "delivery-report": "VEHICLE_MODEL",
            "oil-change-intervals": "Model",
        },
    ),
    FieldDefinition(
        id="vehicleMiles",
        display_name="Miles",
        record_path=(VEHICLE, "miles"),
        required=True,
        validation=_DIGITS,
        document_mapping={
            "deal-check-list": "Miles",
            "delivery-report": "VEHICLE_MILES",
            "oil-change-intervals": "Miles",
        },
    ),
    # --- Trade-in ---
    FieldDefinition(
        id="tradeVin",
        display_name="Trade-in VIN",
        record_path=(TRADE_IN, "vin"),
        required=requires_trade_in,
        validation=_VIN,
        document_mapping={
            "deal-check-list": "Trade VIN",
            "payoff-authorization": "TRADE_VIN",
        },
    ),
    FieldDefinition(
        id="tradeYear",
        display_name="Trade-in Year",
        record_path=(TRADE_IN, "year"),
        required=requires_trade_in,
        validation=_YEAR,
        document_mapping={
            "deal-check-list": "Trade Year",
            "payoff-authorization": "TRADE_YEAR",
        },
    ),
    FieldDefinition(
        id="tradeMake",
        display_name="Trade-in Make",
        record_path=(TRADE_IN, "make"),
        required=requires_trade_in,
        document_mapping={
            "deal-check-list": "Trade Make",
            "payoff-authorization": "TRADE_MAKE",
        },
    ),
    FieldDefinition(
        id="tradeModel",
        display_name="Trade-in Model",
        record_path=(TRADE_IN, "model"),
        required=requires_trade_in,
        document_mapping={
            "deal-check-list": "Trade Model",
            "payoff-authorization": "TRADE_MODEL",
        },
    ),
    FieldDefinition(
        id="tradeMiles",
        display_name="Trade-in Miles",
        record_path=(TRADE_IN, "miles"),
        required=requires_trade_in,
        validation=_DIGITS,
        document_mapping={
            "deal-check-list": "Trade Miles",
            "payoff-authorization": "TRADE_MILES",
        },
    ),
    # --- Lender ---
    FieldDefinition(
        id="lenderName",
        display_name="Bank/Lender Name",
        record_path=(LENDER, "name"),
        required=requires_unpaid_trade,
        document_mapping={"payoff-authorization": "LENDER_NAME"},
    ),
    FieldDefinition(
        id="lenderPhone",
        display_name="Lender Phone",
        record_path=(LENDER, "phone"),
        required=requires_unpaid_trade,
        validation=_PHONE,
        document_mapping={"payoff-authorization": "LENDER_PHONE"},
    ),
    FieldDefinition(
        id="lenderAddress",
        display_name="Lender Address",
        record_path=(LENDER, "address"),
        required=requires_unpaid_trade,
        document_mapping={"payoff-authorization": "LENDER_ADDRESS"},
    ),
    FieldDefinition(
        id="accountNumber",
        display_name="Account Number",
        record_path=(LENDER, "account_number"),
        required=requires_unpaid_trade,
        document_mapping={"payoff-authorization": "ACCOUNT_NUMBER"},
    ),
    FieldDefinition(
        id="payoffAmount",
        display_name="Payoff Amount",
        record_path=(LENDER, "payoff_amount"),
        required=requires_unpaid_trade,
        validation=_MONEY,
        document_mapping={"payoff-authorization": "PAYOFF_AMOUNT"},
    ),
    FieldDefinition(
        id="perDiemAmount",
        display_name="Per Diem Amount",
        record_path=(LENDER, "per_diem_amount"),
        required=requires_unpaid_trade,
        validation=_MONEY,
        document_mapping={"payoff-authorization": "PER_DIEM_AMOUNT"},
    ),
]

# Core identity keys accepted from extraction even though they are not field IDs.
# "address" is what license scans and older prompts emit for the street line.
IDENTITY_FIELDS: dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "address": "street_address",
    "city": "city",
    "state": "state",
    "zipCode": "zip_code",
    "email": "email",
    "cellPhone": "cell_phone",
    "homePhone": "home_phone",
}


# Default form-field names per abstract key, used when a template has not been analyzed.
DEFAULT_FIELD_MAPPING: dict[str, dict[str, tuple[str, ...]]] = {
    CUSTOMER: {
        "firstName": ("First Name", "Customer Name"),
        "lastName": ("Last Name",),
        "streetAddress": ("Street Address", "Address"),
        "city": ("City",),
        "state": ("State",),
        "zipCode": ("Zip", "Zip Code", "Postal Code"),
        "email": ("Email", "Email Address"),
        "cellPhone": ("Cell Phone", "Mobile Phone", "Phone"),
        "homePhone": ("Home Phone",),
    },
    VEHICLE: {
        "vin": ("VIN", "Vehicle VIN"),
        "stockNumber": ("Stock Number", "Stock #"),
        "year": ("Year", "Vehicle Year"),
        "make": ("Make", "Vehicle Make"),
        "model": ("Model", "Vehicle Model"),
        "miles": ("Miles", "Mileage", "Odometer"),
    },
    TRADE_IN: {
        "vin": ("Trade-In VIN", "Trade VIN"),
        "year": ("Trade-In Year", "Trade Year"),
        "make": ("Trade-In Make", "Trade Make"),
        "model": ("Trade-In Model", "Trade Model"),
        "miles": ("Trade-In Miles", "Trade Miles", "Trade Mileage"),
    },
    LENDER: {
        "name": ("Lender Name", "Bank Name"),
        "phone": ("Lender Phone", "Bank Phone"),
        "address": ("Lender Address", "Bank Address"),
        "accountNumber": ("Account Number", "Account #"),
        "payoffAmount": ("Payoff Amount", "Loan Payoff"),
        "perDiemAmount": ("Per Diem", "Daily Interest"),
    },
}
