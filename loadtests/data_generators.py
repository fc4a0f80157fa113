"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules
and match the exact field names expected by the API's Pydantic request
schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

SIZES = ["XS", "S", "M", "L", "XL", "XXL"]
CRAFTS = ["Basket", "Tote", "Coaster", "Placemat", "Fan", "Pouch", "Hat", "Runner"]
MATERIALS = ["Abaca", "Rattan", "Bamboo", "Pandan", "Buri", "Water Hyacinth"]


# ---------- Actors ----------


def actor_headers(actor_id: str, role: str) -> dict:
    """Headers carrying the verified acting identity."""
    return {"X-Actor-Id": actor_id, "X-Actor-Role": role}


def seller_id() -> str:
    return f"seller-lt-{uuid.uuid4().hex[:8]}"


def buyer_id() -> str:
    return f"buyer-lt-{uuid.uuid4().hex[:8]}"


# ---------- Products ----------


def size_stock(min_quantity: int = 0, max_quantity: int = 10) -> list[dict]:
    """A ledger of two to four distinct sizes."""
    sizes = random.sample(SIZES, k=random.randint(2, 4))
    return [{"size": size, "quantity": random.randint(min_quantity, max_quantity)} for size in sizes]


def product_data(sized: bool = True, stock: int | None = None) -> dict:
    """Generate a CreateProductRequest payload.

    Sized products carry a size ledger; unsized ones carry ``total_stock``.
    """
    name = f"{random.choice(MATERIALS)} {random.choice(CRAFTS)}"
    price = round(random.uniform(80.0, 2500.0), 2)
    payload = {
        "name": name,
        "description": fake.paragraph(nb_sentences=2),
        "price": price,
        "original_price": round(price * random.uniform(1.0, 1.3), 2),
        "images": [f"https://img.example.com/{uuid.uuid4().hex[:12]}.jpg"],
    }
    if sized:
        payload["size_stock"] = size_stock(min_quantity=1)
    else:
        payload["total_stock"] = stock if stock is not None else random.randint(5, 50)
    return payload


# ---------- Orders ----------


def shipping_address() -> dict:
    return {
        "name": fake.name()[:255],
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "province": fake.state()[:100],
        "postal_code": fake.postcode()[:20],
        "country": "PH",
        "phone": fake.msisdn()[:50],
    }


def order_line(product_id: str, size: str | None = None, quantity: int | None = None) -> dict:
    line = {"product_id": product_id, "quantity": quantity or random.randint(1, 2)}
    if size:
        line["size"] = size
    return line


def order_data(lines: list[dict]) -> dict:
    """Generate a PlaceOrderRequest payload for the given lines."""
    return {
        "items": lines,
        "shipping_address": shipping_address(),
        "payment_method": random.choice(["cod", "card", "gcash", "paymaya"]),
    }


# ---------- Reviews / Messages ----------


def review_data(order_id: str, product_id: str) -> dict:
    return {
        "order_id": order_id,
        "product_id": product_id,
        "rating": random.randint(3, 5),
        "comment": fake.sentence(nb_words=12),
    }


def message_data(receiver_id: str, product_id: str | None = None) -> dict:
    return {"receiver_id": receiver_id, "message": fake.sentence(nb_words=10), "product_id": product_id}
