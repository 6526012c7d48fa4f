"""
wholesale/orders/validators.py
------------------------------
Pure-Python validation for order request bodies.
Returns a dict of field -> error_message.
An empty dict means the payload is valid.
"""


# Largest quantity accepted on a single line.
MAX_QTY = 1_000_000


def _is_int(value) -> bool:
    # bool is an int subclass; JSON true must not count as a quantity
    return isinstance(value, int) and not isinstance(value, bool)


def validate_order_payload(data) -> dict:
    """
    Validate a decoded JSON body of the form
        {"items": [{"productId": "...", "qty": 3}, ...]}

    Field keys use dotted paths, e.g. 'items.2.qty'.
    """
    errors = {}

    if not isinstance(data, dict):
        errors['body'] = 'Request body must be a JSON object.'
        return errors

    items = data.get('items')
    if items is None:
        errors['items'] = 'Items are required.'
        return errors
    if not isinstance(items, list):
        errors['items'] = 'Items must be a list.'
        return errors
    if not items:
        errors['items'] = 'At least one item is required.'
        return errors

    for i, item in enumerate(items):
        prefix = f'items.{i}'
        if not isinstance(item, dict):
            errors[prefix] = 'Each item must be an object.'
            continue

        # ── productId ─────────────────────────────────────────────
        product_id = item.get('productId')
        if product_id is None:
            errors[f'{prefix}.productId'] = 'Product id is required.'
        elif not isinstance(product_id, str) or not product_id.strip():
            errors[f'{prefix}.productId'] = 'Product id must be a non-empty string.'

        # ── qty ───────────────────────────────────────────────────
        qty = item.get('qty')
        if qty is None:
            errors[f'{prefix}.qty'] = 'Quantity is required.'
        elif not _is_int(qty):
            errors[f'{prefix}.qty'] = 'Quantity must be a whole number.'
        elif qty <= 0:
            errors[f'{prefix}.qty'] = 'Quantity must be greater than zero.'
        elif qty > MAX_QTY:
            errors[f'{prefix}.qty'] = f'Quantity must be at most {MAX_QTY:,}.'

    return errors


def parse_order_payload(data) -> list:
    """
    Convert a validated payload to [(product_id, qty), ...] in request order.
    Call only after validate_order_payload returns no errors.
    """
    return [(item['productId'].strip(), int(item['qty'])) for item in data['items']]
