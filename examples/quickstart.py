#!/usr/bin/env python3
"""
Marketplace Quickstart — full listing lifecycle in one script.

Registers two users → lists an item as the first → shows the second
can't touch it → updates, uploads an image, deletes as the owner.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: marketplace serve  (http://localhost:5000)
"""

import sys
import uuid

import httpx

BASE = "http://localhost:5000/api"

# Smallest valid PNG: 1x1 transparent pixel
PIXEL_PNG = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000185d114090000000049454e44ae426082"
)


def register(client: httpx.Client, name: str) -> dict:
    """Register a fresh user and return Authorization headers."""
    email = f"{name.lower()}-{uuid.uuid4().hex[:6]}@example.com"
    resp = client.post(
        "/register",
        json={"email": email, "name": name, "password": "demo-password", "phone": "555-0100"},
    )
    assert resp.status_code == 201, f"Registration failed: {resp.text}"
    print(f"   {name}: {email}")
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def main():
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        sys.exit(1)
    health = resp.json()
    print(f"  Database: {health['database']}")
    print(f"  Redis:    {health['redis']}")

    # ── Users ─────────────────────────────────────────────────────
    print("\n1. Registering users...")
    alice = register(client, "Alice")
    bob = register(client, "Bob")

    me = client.get("/me", headers=alice).json()
    print(f"   Logged in as {me['name']} (id={me['id']})")

    # ── Create ────────────────────────────────────────────────────
    print("\n2. Alice lists a desk...")
    resp = client.post("/items", json={"title": "Desk", "price": 50}, headers=alice)
    assert resp.status_code == 201, f"Failed: {resp.text}"
    item = resp.json()
    print(f"   Item #{item['id']}: {item['title']} for {item['price']} (owner {item['user_id']})")

    # ── Ownership ─────────────────────────────────────────────────
    print("\n3. Bob tries to reprice it...")
    resp = client.put(f"/items/{item['id']}", json={"price": 1}, headers=bob)
    print(f"   → {resp.status_code} (expected 403)")

    # ── Update ────────────────────────────────────────────────────
    print("\n4. Alice updates the price...")
    resp = client.put(f"/items/{item['id']}", json={"price": 60}, headers=alice)
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Price now {resp.json()['price']}")

    # ── Image ─────────────────────────────────────────────────────
    print("\n5. Alice uploads a photo...")
    resp = client.post(
        f"/items/{item['id']}/images",
        files={"file": ("desk.png", PIXEL_PNG, "image/png")},
        headers=alice,
    )
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Image at {resp.json()['image']}")

    # ── Browse ────────────────────────────────────────────────────
    print("\n6. Anyone can browse...")
    items = client.get("/items").json()["items"]
    print(f"   {len(items)} item(s) listed")

    # ── Delete ────────────────────────────────────────────────────
    print("\n7. Alice removes the listing...")
    resp = client.delete(f"/items/{item['id']}", headers=alice)
    assert resp.status_code == 200, f"Failed: {resp.text}"
    resp = client.get(f"/items/{item['id']}")
    print(f"   GET after delete → {resp.status_code} (expected 404)")

    print("\nDone.")


if __name__ == "__main__":
    main()
