# Overview: Flask API routes for products; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..services import product_service
from ..validation import NotFoundError, ValidationError

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products_route():
    return jsonify(product_service.list_products()), 200


@products_bp.post("")
def create_product_route():
    payload = request.get_json(silent=True) or {}
    try:
        created = product_service.add_product(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500
    return created, 201


@products_bp.get("/by-sku/<sku>")
def get_product_by_sku_route(sku: str):
    """Barcode/SKU lookup used by the sales screen."""
    product = product_service.get_product_by_sku(sku)
    if product is None:
        return {"error": "Product not found"}, 404
    return product, 200


@products_bp.get("/<doc_id>")
def get_product_route(doc_id: str):
    try:
        return product_service.get_product(doc_id), 200
    except NotFoundError as e:
        return {"error": str(e)}, 404


@products_bp.put("/<doc_id>")
def update_product_route(doc_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        updated = product_service.update_product(doc_id, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to update product")
        return {"error": "Internal server error"}, 500
    return updated, 200


@products_bp.delete("/<doc_id>")
def delete_product_route(doc_id: str):
    try:
        product_service.delete_product(doc_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return {"ok": True}, 200
