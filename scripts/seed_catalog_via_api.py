#!/usr/bin/env python3
"""Seed a demo seller and a few barcoded product variations via the public API.

Flow:
1) Create (or reuse by name) the demo seller
2) Create each product variation through /scan/add-new
3) Treat an "already assigned" barcode as seeded by a previous run
4) Optionally place one order to smoke-test reservation and pricing
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Dict, List, Optional

import httpx


DEFAULT_BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/api/v1"


class ApiError(RuntimeError):
    pass


def _json_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _require_success(response: httpx.Response, context: str) -> Dict[str, Any]:
    payload = _json_or_text(response)
    if response.status_code >= 400:
        raise ApiError(f"{context} failed ({response.status_code}): {payload}")
    if not isinstance(payload, dict):
        raise ApiError(f"{context} returned non-JSON payload: {payload}")
    if payload.get("success") is False:
        raise ApiError(f"{context} returned success=false: {payload}")
    return payload


def ensure_seller(client: httpx.Client, name: str, contact_number: Optional[str]) -> int:
    resp = client.get(f"{API_PREFIX}/sellers", params={"search": name, "limit": 100})
    payload = _require_success(resp, "Search sellers")
    for seller in payload.get("data") or []:
        if seller.get("name") == name:
            return int(seller["id"])

    resp = client.post(
        f"{API_PREFIX}/sellers",
        json={"name": name, "contact_number": contact_number},
    )
    payload = _require_success(resp, f"Create seller '{name}'")
    return int(payload["data"]["id"])


def create_variant(client: httpx.Client, item: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    resp = client.post(
        f"{API_PREFIX}/scan/add-new",
        json={
            "product": {
                "name": item["product"],
                "gst_percent": str(item["gst_percent"]),
                "hsn_code": item.get("hsn_code"),
            },
            "variation": {"name": item["variation"]},
            "product_variation": {
                "price": str(item["price"]),
                "box_quantity": item["box_quantity"],
                "stock_in_hand": item["stock"],
                "product_qr_code": item["product_qr_code"],
                "box_qr_code": item["box_qr_code"],
            },
        },
    )
    # A barcode that is already assigned means an earlier run seeded it.
    if resp.status_code == 400 and "already assigned" in str(_json_or_text(resp)):
        return None
    payload = _require_success(resp, f"Create variant '{item['product']} {item['variation']}'")
    return payload.get("data") or {}


def lookup_variant_id(client: httpx.Client, barcode: str) -> int:
    resp = client.get(f"{API_PREFIX}/scan/{barcode}")
    payload = _require_success(resp, f"Lookup barcode {barcode}")
    return int(payload["data"]["variant_id"])


def place_sample_order(client: httpx.Client, seller_id: int, variant_ids: List[int]) -> Dict[str, Any]:
    resp = client.post(
        f"{API_PREFIX}/orders",
        json={
            "seller_id": seller_id,
            "items": [{"variant_id": variant_id, "quantity": 1} for variant_id in variant_ids],
            "notes": "Seed smoke order",
        },
    )
    payload = _require_success(resp, "Create sample order")
    return payload.get("data") or {}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed demo catalog data via the order API")
    parser.add_argument("--base-url", default=os.getenv("INVENTORY_API_BASE_URL", DEFAULT_BASE_URL))
    parser.add_argument("--seller-name", default="Demo Traders")
    parser.add_argument("--seller-contact", default="9876543210")
    parser.add_argument(
        "--with-order",
        action="store_true",
        help="Place one order for a single strip of every seeded variant",
    )
    return parser.parse_args()


CATALOG: List[Dict[str, Any]] = [
    {
        "product": "Paracetamol 500",
        "variation": "10 Tablets",
        "gst_percent": "12",
        "hsn_code": "3004",
        "price": "18.50",
        "box_quantity": 12,
        "stock": 240,
        "product_qr_code": "SEED-PCM500-U",
        "box_qr_code": "SEED-PCM500-B",
    },
    {
        "product": "Cough Syrup",
        "variation": "100ml",
        "gst_percent": "18",
        "hsn_code": "3004",
        "price": "65.00",
        "box_quantity": 24,
        "stock": 96,
        "product_qr_code": "SEED-CS100-U",
        "box_qr_code": "SEED-CS100-B",
    },
    {
        "product": "ORS Sachet",
        "variation": "21g",
        "gst_percent": "5",
        "hsn_code": "3004",
        "price": "20.00",
        "box_quantity": 50,
        "stock": 500,
        "product_qr_code": "SEED-ORS21-U",
        "box_qr_code": "SEED-ORS21-B",
    },
]


def main() -> int:
    args = parse_args()

    with httpx.Client(base_url=args.base_url.rstrip("/"), timeout=30.0, follow_redirects=True) as client:
        seller_id = ensure_seller(client, args.seller_name, args.seller_contact)
        print(f"Seller: id={seller_id}, name={args.seller_name}")

        variant_ids: List[int] = []
        print("Product variations:")
        for item in CATALOG:
            created = create_variant(client, item)
            if created is None:
                variant_id = lookup_variant_id(client, item["product_qr_code"])
                print(f"- {item['product']} {item['variation']}: id={variant_id} (already seeded)")
            else:
                variant_id = int(created["id"])
                print(
                    f"- {item['product']} {item['variation']}: id={variant_id}, "
                    f"stock={created.get('stock_in_hand')}"
                )
            variant_ids.append(variant_id)

        if args.with_order:
            order = place_sample_order(client, seller_id, variant_ids)
            print(f"Sample order: id={order.get('id')}, grand_total={order.get('grand_total')}")

    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except ApiError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        raise SystemExit(1)
