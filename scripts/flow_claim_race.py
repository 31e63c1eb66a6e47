#!/usr/bin/env python3
"""
Bed claim race and lifecycle flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Tokens are minted locally with the service's JWT secret, standing in for the
identity service. Run against a development server.

Usage:
    python scripts/flow_claim_race.py
    python scripts/flow_claim_race.py --claimants 20 --beds 4 --check-in 2026-12-01

Flow:
    1. Create a property and a room (as owner)
    2. Fire concurrent claims for the same bed (as many tenants)
    3. Confirm, check in and check out the winning booking (as owner)
    4. Print the room and property counters after each step
"""

import argparse
import asyncio
import json
import sys
import uuid
from datetime import date, timedelta

import httpx

from bedledger.core.security import create_access_token

BASE_URL = "http://localhost:8000"
API = f"{BASE_URL}/api/v1"


def mint_token(role: str) -> str:
    return create_access_token({"sub": str(uuid.uuid4()), "role": role})


def headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def require(response: httpx.Response, expected: int) -> dict:
    """Exit on an unexpected status, otherwise return the JSON body."""
    if response.status_code != expected:
        print(f"ERROR ({response.status_code}): {response.text}")
        sys.exit(1)
    return response.json() if response.text else {}


async def print_counters(client: httpx.AsyncClient, token: str, property_id: str, room_id: str):
    room = require(await client.get(f"{API}/rooms/{room_id}", headers=headers(token)), 200)
    prop = require(await client.get(f"{API}/properties/{property_id}", headers=headers(token)), 200)
    print(f"  room:     {room['available_beds']}/{room['total_beds']} beds available")
    print(f"  property: {prop['available_beds']}/{prop['total_beds']} beds available")
    print(f"  beds:     {json.dumps({b['bed_number']: b['status'] for b in room['beds']})}")


async def main():
    parser = argparse.ArgumentParser(description="Concurrent bed claim flow")
    parser.add_argument("--claimants", type=int, default=10, help="Concurrent tenants")
    parser.add_argument("--beds", type=int, default=3, help="Beds in the room")
    parser.add_argument(
        "--check-in",
        default=(date.today() + timedelta(days=7)).isoformat(),
        help="Check-in date (YYYY-MM-DD)",
    )
    args = parser.parse_args()

    owner_token = mint_token("owner")

    async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
        # Step 1: Inventory
        print_step(1, "Create property and room")
        prop = require(
            await client.post(
                f"{API}/properties",
                headers=headers(owner_token),
                json={"name": "Race Test House", "security_deposit": "500.00"},
            ),
            201,
        )
        room = require(
            await client.post(
                f"{API}/properties/{prop['id']}/rooms",
                headers=headers(owner_token),
                json={"room_number": "101", "total_beds": args.beds, "rent_per_bed": "250.00"},
            ),
            201,
        )
        bed = room["beds"][0]
        print(f"Property {prop['id']}, room {room['id']}, target bed {bed['bed_number']}")
        await print_counters(client, owner_token, prop["id"], room["id"])

        # Step 2: Race
        print_step(2, f"{args.claimants} concurrent claims for {bed['bed_number']}")
        payload = {
            "property_id": prop["id"],
            "room_id": room["id"],
            "bed_id": bed["id"],
            "check_in_date": args.check_in,
        }
        responses = await asyncio.gather(
            *(
                client.post(
                    f"{API}/bookings", headers=headers(mint_token("tenant")), json=payload
                )
                for _ in range(args.claimants)
            )
        )
        winners = [r for r in responses if r.status_code == 201]
        losers = [r.json().get("code") for r in responses if r.status_code != 201]
        print(f"Accepted: {len(winners)}, rejected: {len(losers)} ({sorted(set(losers))})")
        if len(winners) != 1:
            print("ERROR: expected exactly one accepted claim")
            sys.exit(1)

        booking = winners[0].json()
        print(f"Winning booking: {booking['booking_reference']}")
        await print_counters(client, owner_token, prop["id"], room["id"])

        # Step 3: Lifecycle
        for step, target in enumerate(("confirmed", "checked_in", "checked_out"), start=3):
            print_step(step, f"Move booking to {target}")
            require(
                await client.post(
                    f"{API}/bookings/{booking['id']}/status",
                    headers=headers(owner_token),
                    json={"status": target},
                ),
                200,
            )
            await print_counters(client, owner_token, prop["id"], room["id"])

    print("\nFlow complete")


if __name__ == "__main__":
    asyncio.run(main())
