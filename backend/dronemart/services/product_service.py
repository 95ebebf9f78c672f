# Overview: Service-layer operations for products; encapsulates business logic and database work.

from __future__ import annotations

from ..extensions import db
from ..models import Product
from ..validation import MAX_ROW_ID, FieldRule, PayloadPolicy, coerce_int, validate_payload
from .credential_service import Identity
from .ownership_service import ResourceKind, authorize_resource
from .patching import ProductPatch, apply_patch
from .persistence import transaction_scope


REGISTER_PRODUCT_POLICY = PayloadPolicy(
    fields={
        "business_id": FieldRule("int", max_value=MAX_ROW_ID),
        "name": FieldRule("str", max_length=120),
        "description": FieldRule("str", nullable=True),
        "price": FieldRule("price", column="price_cents"),
    },
    required_on_create=frozenset({"business_id", "name", "price"}),
)

UPDATE_PRODUCT_POLICY = PayloadPolicy(
    fields={
        "name": FieldRule("str", max_length=120),
        "description": FieldRule("str"),
        "price": FieldRule("price", column="price_cents"),
    },
)


def register_product(identity: Identity, payload: dict) -> dict:
    """
    Add a product to one of the caller's businesses.

    The business must exist (404), belong to the caller (403) and still be
    active (404).
    """
    cleaned = validate_payload(payload=payload, policy=REGISTER_PRODUCT_POLICY, partial=False)
    business_id = cleaned["business_id"]
    authorize_resource(identity, ResourceKind.BUSINESS, business_id, require_active=True)

    with transaction_scope() as session:
        product = Product(
            business_id=business_id,
            name=cleaned["name"],
            description=cleaned.get("description"),
            price_cents=cleaned["price_cents"],
            is_active=True,
        )
        session.add(product)
        session.flush()
        product_id = product.id

    body = product.to_dict()
    body["product_id"] = product_id
    body["message"] = "Product registered successfully"
    return body


def list_products_by_business(identity: Identity, business_id) -> list[dict]:
    business_id = coerce_int("business_id", business_id)
    authorize_resource(identity, ResourceKind.BUSINESS, business_id)

    products = (
        db.session.query(Product)
        .filter(Product.business_id == business_id, Product.is_active.is_(True))
        .order_by(Product.id)
        .all()
    )
    return [p.to_dict() for p in products]


def update_product(identity: Identity, product_id: int, payload: dict) -> dict:
    cleaned = validate_payload(payload=payload, policy=UPDATE_PRODUCT_POLICY, partial=True)
    authorize_resource(identity, ResourceKind.PRODUCT, product_id, require_active=True)

    patch = ProductPatch.from_cleaned(cleaned)
    if patch.is_empty():
        return {"message": f"No fields to update for product {product_id}", "product_id": product_id}

    with transaction_scope():
        product = db.session.get(Product, product_id)
        apply_patch(product, patch)

    return {"message": f"Product {product_id} has been updated successfully", "product_id": product_id}


def deactivate_product(identity: Identity, product_id: int) -> dict:
    """Soft delete. Past orders keep their line prices."""
    authorize_resource(identity, ResourceKind.PRODUCT, product_id, require_active=True)

    with transaction_scope():
        product = db.session.get(Product, product_id)
        product.is_active = False

    return {"message": f"Product {product_id} has been deactivated", "product_id": product_id}
