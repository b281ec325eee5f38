"""
Offline console walkthrough of quoting and the modification workflow.

Uses the real classifier, pricing engine, store and coordinator with an
in-memory notifier. No server, no network calls.

Usage:
    python console_demo.py
    python console_demo.py --scenario reject
    python console_demo.py --scenario quote
"""

import argparse
from typing import Optional

from bookingflow.bookings import BookingService, describe_cost
from bookingflow.config import settings
from bookingflow.errors import BookingFlowError
from bookingflow.modifications.coordinator import ModificationApprovalCoordinator
from bookingflow.modifications.notifications import RecordingNotifier
from bookingflow.modifications.store import BookingStore
from bookingflow.pricing.engine import PriceBreakdown, PricingRuleEngine
from bookingflow.schemas.booking_schema import Booking, BookingDraft, ServiceSelection
from bookingflow.schemas.modification_schema import ModificationRequest

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

CLIENT_ID = "client-001"
NANNY_ID = "nanny-001"
ADMIN_ID = "admin-001"


class ConsoleSession:
    """Plays pre-scripted client, admin and nanny actions in the terminal."""

    SCENARIOS = ("accept", "reject", "decline", "quote")

    def __init__(self) -> None:
        self.store = BookingStore()
        self.engine = PricingRuleEngine(cache_size=settings.pricing.quote_cache_size)
        self.notifier = RecordingNotifier()
        self.bookings = BookingService(self.store, self.engine)
        self.coordinator = ModificationApprovalCoordinator(self.store, self.engine, self.notifier)
        self.symbol = settings.pricing.currency_symbol

    def actor_say(self, actor: str, text: str) -> None:
        print(f"{GREEN}{BOLD}[{actor}]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def show_quote(self, title: str, quote: PriceBreakdown) -> None:
        print(f"\n{BLUE}{BOLD}{title}{RESET}")
        unit = quote.base_unit_rate.unit.value
        self.system_log(f"Base rate: {self.symbol}{quote.base_unit_rate.amount}/{unit}")
        for item in quote.line_items:
            self.system_log(
                f"{item.label}: {self.symbol}{item.rate.amount}/{item.rate.unit.value} "
                f"= {self.symbol}{item.total_amount}"
            )
        for day in quote.daily_breakdown:
            tag = "weekend" if day.is_weekend else "weekday"
            self.system_log(f"{day.day.isoformat()} ({tag}): {self.symbol}{day.rate}")
        self.system_log(f"Subtotal {self.symbol}{quote.subtotal}, fee {self.symbol}{quote.service_fee}")
        self.actor_say("Quote", f"Total {self.symbol}{quote.total}")

    def run_quotes(self) -> None:
        self.show_quote("Date night, 4 hours, cooking", self.engine.price(
            "date_night", total_hours=4, services=ServiceSelection(cooking=True),
        ))
        self.show_quote("Date day on a Friday (SAST), 6 hours", self.engine.price(
            "date_day", total_hours=6, selected_dates=["2025-11-20T22:00:00.000Z"],
        ))
        self.show_quote("Gap coverage, one week, housekeeping", self.engine.price(
            "temporary_support",
            selected_dates=[f"2025-03-{d:02d}" for d in range(3, 10)],
            services=ServiceSelection(light_housekeeping=True),
            home_size="grand_estate",
        ))
        try:
            self.engine.price("emergency", total_hours=4)
        except BookingFlowError as exc:
            print(f"\n{RED}Emergency, 4 hours: {exc}{RESET}")

    def confirm_long_term(self) -> Booking:
        booking = self.bookings.confirm(BookingDraft(
            client_id=CLIENT_ID,
            nanny_id=NANNY_ID,
            duration_type="long_term",
            home_size="family_hub",
            living_arrangement="live_out",
        ))
        self.actor_say("Client", f"Booked a long-term nanny at {describe_cost(booking, self.symbol)}")
        return booking

    def submit_cooking(self, booking: Booking) -> ModificationRequest:
        request = self.coordinator.submit(
            booking.booking_id, CLIENT_ID, "service_addition", ["cooking"],
            client_notes="Please add dinner prep",
        )
        self.actor_say(
            "Client",
            f"Requested cooking ({request.modification_id}), "
            f"adjustment {self.symbol}{request.price_adjustment}",
        )
        self.system_log(f"Status: {request.status.value}")
        return request

    def run_scenario(self, scenario: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  BOOKING WORKFLOW - Scenario: {scenario}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        if scenario == "quote":
            self.run_quotes()
            return
        if scenario not in self.SCENARIOS:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        booking = self.confirm_long_term()
        request = self.submit_cooking(booking)

        if scenario == "reject":
            request = self.coordinator.reject(
                request.modification_id, ADMIN_ID, "Cooking is not available this month",
            )
            self.actor_say("Admin", f"Rejected: {request.admin_notes}")
        else:
            request = self.coordinator.approve(request.modification_id, ADMIN_ID)
            self.actor_say("Admin", "Approved and forwarded to the nanny")
            self.system_log(f"Status: {request.status.value}")
            accept = scenario == "accept"
            request = self.coordinator.nanny_respond(
                request.modification_id, NANNY_ID, accept=accept,
            )
            self.actor_say("Nanny", "Accepted" if accept else "Declined")

        final = self.store.get_booking(booking.booking_id)
        self._summary(request, final)

    def _summary(self, request: ModificationRequest, booking: Booking) -> None:
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Final status: {request.status.value}{RESET}")
        print(f"{DIM}  Status trace: {' -> '.join(h.status.value for h in request.history)}{RESET}")
        print(f"{DIM}  Booking cost: {describe_cost(booking, self.symbol)}{RESET}")
        print(f"{DIM}  Notifications: {[n.event.value for n in self.notifier.sent]}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Offline console walkthrough")
    parser.add_argument(
        "--scenario",
        choices=list(ConsoleSession.SCENARIOS),
        default="accept",
        help="Pre-scripted scenario to play",
    )
    args = parser.parse_args(argv)

    try:
        ConsoleSession().run_scenario(args.scenario)
    except BookingFlowError as exc:
        print(f"{YELLOW}Workflow error: {exc}{RESET}")


if __name__ == "__main__":
    main()
