"""
Offline console demo: runs a full sales conversation without any API keys.

Uses the real session pipeline (extraction, record store, scenario resolver,
stage machine, technique selector) with a scripted chat client standing in
for the model. No network calls. Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario new-no-trade
    python console_demo.py --scenario used-unpaid-trade
"""

import argparse
import asyncio
import random
import re
from typing import Optional

from cardealpro.config import settings
from cardealpro.session import SalesSession

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

_NAME = re.compile(r"\b(?:[Nn]ame is|[Tt]his is|[Cc]ustomer is)\s+([A-Z][a-z]+)\s+([A-Z][a-z]+)")
_PHONE = re.compile(r"\(\d{3}\) \d{3}-\d{4}")
_EMAIL = re.compile(r"[\w.+-]+@[\w-]+\.[\w.]+")
_VIN = re.compile(r"\b[A-HJ-NPR-Z0-9]{17}\b")
_MILES = re.compile(r"\b(?:with|odometer)\s+(\d[\d,]*)\s*miles\b", re.IGNORECASE)
_YEAR_MAKE_MODEL = re.compile(r"\b((?:19|20)\d{2})\s+([A-Z][a-z]+)\s+([A-Z][A-Za-z0-9]+)")
_ADDRESS = re.compile(
    r"\blives? at\s+(\d+\s[\w\s]+?),\s*([A-Za-z\s]+?),\s*([A-Z]{2})\s+(\d{5})"
)
_PAYOFF = re.compile(r"\bowes?\s+(\$[\d,]+(?:\.\d{2})?)")
_LENDER = re.compile(r"\bwith\s+([A-Z][\w]*(?:\s[A-Z][\w]*)*\s(?:Bank|Financial|Credit Union))")


class ScriptedChatClient:
    """Keyword-driven stand-in for the chat model that emits field tags."""

    async def complete(self, messages: list[dict[str, str]], model: Optional[str] = None) -> str:
        text = messages[-1]["content"]
        lower = text.lower()
        trade_context = "trade" in lower
        tags: list[str] = []

        name = _NAME.search(text)
        if name:
            tags.append(f'<field name="firstName">{name.group(1)}</field>')
            tags.append(f'<field name="lastName">{name.group(2)}</field>')
        address = _ADDRESS.search(text)
        if address:
            street, city, state, zip_code = address.groups()
            tags.append(f'<field name="streetAddress">{street.strip()}</field>')
            tags.append(f'<field name="city">{city.strip()}</field>')
            tags.append(f'<field name="state">{state}</field>')
            tags.append(f'<field name="zipCode">{zip_code}</field>')
        phone = _PHONE.search(text)
        if phone:
            tags.append(f'<field name="cellPhone">{phone.group(0)}</field>')
        email = _EMAIL.search(text)
        if email:
            tags.append(f'<field name="email">{email.group(0)}</field>')

        prefix = "tradeIn_" if trade_context else "vehicle_"
        vehicle = _YEAR_MAKE_MODEL.search(text)
        if vehicle:
            year, make, model_name = vehicle.groups()
            tags.append(f'<field name="{prefix}year">{year}</field>')
            tags.append(f'<field name="{prefix}make">{make}</field>')
            tags.append(f'<field name="{prefix}model">{model_name}</field>')
        vin = _VIN.search(text)
        if vin:
            tags.append(f'<field name="{prefix}vin">{vin.group(0)}</field>')
        miles = _MILES.search(text)
        if miles:
            tags.append(f'<field name="{prefix}miles">{miles.group(1).replace(",", "")}</field>')
        if "stock" in lower:
            stock = re.search(r"stock\s*(?:#|number)?\s*([A-Z0-9-]+)", text, re.IGNORECASE)
            if stock:
                tags.append(f'<field name="stockNumber">{stock.group(1)}</field>')

        lender = _LENDER.search(text)
        if lender:
            tags.append(f'<field name="lender_name">{lender.group(1)}</field>')
        payoff = _PAYOFF.search(text)
        if payoff:
            tags.append(f'<field name="lender_payoffAmount">{payoff.group(1)}</field>')

        reply = "Noted. "
        if "price" in lower or "expensive" in lower:
            reply += "Walk them through the monthly options before the sticker price."
        elif tags:
            reply += "I've captured those details."
        else:
            reply += "Keep the conversation focused on what they need from the vehicle."
        return reply + " " + " ".join(tags)


class ConsoleSession:
    """Drives a SalesSession from the terminal."""

    SCENARIOS: dict[str, list[str]] = {
        "new-no-trade": [
            "Hi, the customer is Jane Doe, looking at a new sedan.",
            "She commutes about 40 miles a day, so fuel economy matters.",
            "Yes, she agrees reliability is important.",
            "She lives at 533 Belleview Ave, Chillicothe, OH 45601",
            "Her cell is (614) 555-1234 and email jane.doe@example.com",
            "Sure, she liked the safety package too.",
            "She picked the 2024 Toyota Camry, stock A1234, with 12 miles",
            "VIN is 4T1B11HK5RU123456",
            "Okay, she is ready to hear the numbers.",
            "She is worried the price is a bit high.",
            "That sounds good, the payment works for her.",
            "Absolutely, she wants to sign the paperwork.",
        ],
        "used-unpaid-trade": [
            "This is Fred Ryan, interested in a used truck.",
            "He lives at 12 Main St, Columbus, OH 43004",
            "Cell (614) 555-9876",
            "His trade is a 2018 Honda Accord with 45,000 miles",
            "He still owes $8,500.00 with First Ohio Bank on the trade",
            "Yes, he agrees the truck fits his work.",
            "He's concerned about the interest on the loan.",
            "Okay, that rate is fine.",
        ],
    }

    MAX_INPUT_LENGTH = settings.server.max_message_length

    def __init__(self, scenario_id: Optional[str] = None, seed: int = 7) -> None:
        self.session = SalesSession(chat_client=ScriptedChatClient(), rng=random.Random(seed))
        if scenario_id:
            self.session.select_scenario(scenario_id)

    def assistant_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Assistant]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  CARDEALPRO SALES ASSISTANT - {title}{RESET}")
        print(f"{BOLD}  Dealership: {settings.dealership.name}{RESET}")
        print(f"{BOLD}  Scenario: {self.session.scenario_id or 'Not selected'}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _summary(self) -> None:
        snapshot = self.session.snapshot()
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Conversation complete.{RESET}")
        print(f"{DIM}  Stage trace: {' -> '.join(snapshot['stage_trace'])}{RESET}")
        print(f"{DIM}  Agreements: {snapshot['agreements']['count']}{RESET}")
        print(f"{DIM}  Records: {snapshot['records']}{RESET}")
        missing = snapshot["missing_fields"]
        print(f"{DIM}  Missing fields: {', '.join(missing) if missing else 'None'}{RESET}")
        print(f"{DIM}  Documents needed: {', '.join(snapshot['required_documents'])}{RESET}")
        if snapshot["validation_issues"]:
            print(f"{YELLOW}  Values to double-check: {snapshot['validation_issues']}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def _process_input(self, text: str) -> None:
        reply = await self.session.send_message(text)
        if reply.content:
            self.assistant_say(reply.content)
        if reply.sales_technique:
            self.system_log(
                f"Technique ({reply.sales_technique.type.value}): {reply.sales_suggestion}"
            )
        for notification in self.session.drain_notifications():
            self.system_log(f"{notification.title}: {notification.message}")
        self.system_log(f"Stage: {self.session.stage.value}")

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        for step in steps:
            if self.session.stage_machine.is_terminal():
                break
            print(f"\n{BLUE}[Salesperson] {RESET}{step}")
            await self._process_input(step)
        self._summary()

    async def run(self) -> None:
        self._banner("Console Demo (type 'quit' to exit)")
        while not self.session.stage_machine.is_terminal():
            user_input = input(f"\n{BLUE}[Salesperson] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                break
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.assistant_say("That was quite long. Could you break it into smaller notes?")
                continue
            await self._process_input(user_input)
        self._summary()


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    console = ConsoleSession(scenario_id=args.scenario)
    if args.scenario:
        asyncio.run(console.run_scenario(args.scenario))
    else:
        asyncio.run(console.run())


if __name__ == "__main__":
    main()
