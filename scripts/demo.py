#!/usr/bin/env python3
"""
Cross-Border SDK — End-to-End Demo Script

Walks through the standard remittance flows against a live sandbox:
forward quote, payment against that quote, one-shot forward and reverse
payments, an encrypted payment, and a rejected payment.

Usage:
    1. cp .env.example .env   (fill in partner id, consumer key, key paths)
    2. python scripts/demo.py [path/to/.env]

Requires: httpx, pydantic, cryptography, python-dotenv
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

# Make the package importable when run from a checkout
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from crossborder_sdk import (  # noqa: E402
    ApiClient,
    ConfigurationError,
    QuotesAPI,
    RemittanceAPI,
    RemittanceResponse,
    ServiceFailure,
    load_config,
)
from crossborder_sdk import samples as rf  # noqa: E402

HEADERS = {"Content-Type": "application/xml"}

# ---------------------------------------------------------------------------
# Terminal colors (ANSI)
# ---------------------------------------------------------------------------

class C:
    RESET   = "\033[0m"
    BOLD    = "\033[1m"
    DIM     = "\033[2m"
    RED     = "\033[91m"
    GREEN   = "\033[92m"
    YELLOW  = "\033[93m"
    BLUE    = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN    = "\033[96m"
    WHITE   = "\033[97m"


def banner(text: str, color: str = C.CYAN):
    width = 64
    print()
    print(f"{color}{C.BOLD}{'=' * width}{C.RESET}")
    print(f"{color}{C.BOLD}  {text}{C.RESET}")
    print(f"{color}{C.BOLD}{'=' * width}{C.RESET}")
    print()


def step(n: int, text: str):
    print(f"  {C.BOLD}{C.WHITE}[Step {n}]{C.RESET} {text}")


def ok(text: str):
    print(f"  {C.GREEN}{C.BOLD}OK{C.RESET} {text}")


def fail(text: str):
    print(f"  {C.RED}{C.BOLD}FAIL{C.RESET} {text}")


def info(text: str):
    print(f"  {C.DIM}{text}{C.RESET}")


def show_payment(payment: RemittanceResponse):
    print(f"    {C.DIM}remittance_id:   {payment.remittance_id}{C.RESET}")
    print(f"    {C.DIM}status:          {payment.status or '?'}{C.RESET}")
    if payment.charged_amount:
        print(f"    {C.DIM}charged_amount:  {payment.charged_amount.amount} {payment.charged_amount.currency}{C.RESET}")
    if payment.credited_amount:
        print(f"    {C.DIM}credited_amount: {payment.credited_amount.amount} {payment.credited_amount.currency}{C.RESET}")


def show_failure(failure: ServiceFailure):
    for entry in failure.errors:
        print(f"    {C.RED}x{C.RESET} [{entry.source or '-'}] {entry.reason_code}  {C.DIM}{entry.description}{C.RESET}")


def pause(seconds: float = 1.0):
    time.sleep(seconds)


# ---------------------------------------------------------------------------
# Demo steps
# ---------------------------------------------------------------------------

def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    env_file = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        config = load_config(env_file)
        client = ApiClient(config)
    except ConfigurationError as exc:
        fail(f"Configuration error: {exc}")
        print(f"\n  {C.RED}Set CROSSBORDER_* variables or pass a .env file.{C.RESET}\n")
        sys.exit(1)

    quotes = QuotesAPI(client)
    remittance = RemittanceAPI(client)
    params = {"partner-id": config.partner_id}

    banner("CROSS-BORDER  --  Remittance Demo", C.MAGENTA)
    print(f"  {C.DIM}Endpoint:   {config.base_url}{C.RESET}")
    print(f"  {C.DIM}Partner:    {config.partner_id or '?'}{C.RESET}")
    print(f"  {C.DIM}Encryption: {'on' if config.encryption_enabled else 'off'}{C.RESET}")
    pause(1)

    # -----------------------------------------------------------------------
    # 1. Quote, then pay against it
    # -----------------------------------------------------------------------
    banner("1. Forward Quote + Payment", C.BLUE)
    step(1, "POST /quotes  100.00 USD -> EUR")
    try:
        quote = quotes.get_quote(HEADERS, params, rf.forward_quote("100.00"))
        proposal = quote.first_proposal()
        if proposal is None:
            fail("Quote returned no proposals")
        else:
            ok(f"{len(quote.proposals)} proposal(s); using {proposal.proposal_id}")
            info(f"credited {proposal.credited_amount.amount} {proposal.credited_amount.currency}"
                 f" at fx_rate {proposal.fx_rate}")

            step(2, "POST /payment  proposal_id")
            payment = remittance.make_payment(HEADERS, params, rf.payment_with_quote(proposal.proposal_id))
            ok("Payment accepted")
            show_payment(payment)
    except ServiceFailure as exc:
        fail(f"Rejected (HTTP {exc.status_code})")
        show_failure(exc)
    pause(1)

    # -----------------------------------------------------------------------
    # 2. One-shot payments
    # -----------------------------------------------------------------------
    banner("2. One-Shot Payments", C.GREEN)
    for n, (label, request) in enumerate([
        ("forward 100.00 USD -> EUR", rf.one_shot_forward("100.00")),
        ("reverse -> 90.00 EUR", rf.one_shot_reverse("90.00")),
    ], start=3):
        step(n, f"POST /payment  {label}")
        try:
            show_payment(remittance.make_payment(HEADERS, params, request))
        except ServiceFailure as exc:
            fail(f"Rejected (HTTP {exc.status_code})")
            show_failure(exc)
    pause(1)

    # -----------------------------------------------------------------------
    # 3. Encrypted payment
    # -----------------------------------------------------------------------
    banner("3. Encrypted Payment", C.CYAN)
    step(5, "POST /payment  x-encrypted: true")
    try:
        payment = remittance.make_payment_with_encryption(HEADERS, params, rf.one_shot_forward("50.00"))
        ok("Encrypted payment accepted")
        show_payment(payment)
    except ConfigurationError as exc:
        info(f"Skipped: {exc}")
    except ServiceFailure as exc:
        fail(f"Rejected (HTTP {exc.status_code})")
        show_failure(exc)
    pause(1)

    # -----------------------------------------------------------------------
    # 4. Rejected payment
    # -----------------------------------------------------------------------
    banner("4. Rejected -- Unknown Proposal", C.RED)
    step(6, "POST /payment  proposal_id=pen_000000000000000000")
    try:
        remittance.make_payment(HEADERS, params, rf.payment_with_unknown_proposal())
        fail("Expected the service to reject the proposal")
    except ServiceFailure as exc:
        ok(f"Rejected as expected (HTTP {exc.status_code})")
        show_failure(exc)

    print()
    print(f"  {C.BOLD}{C.MAGENTA}{'~' * 56}{C.RESET}")
    print()


if __name__ == "__main__":
    main()
