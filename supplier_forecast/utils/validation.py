from typing import Any, Dict, List

from supplier_forecast.exceptions import ValidationError


def validate_sku_payload(payload: Any) -> Dict[str, str]:
    """Validate a production tagging payload.

    Args:
        payload: Decoded JSON body, expected as {"skus": [str, ...]}

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not isinstance(payload, dict):
        errors['body'] = 'Request body must be a JSON object'
        return errors

    skus = payload.get('skus')

    if not isinstance(skus, list) or not skus:
        errors['skus'] = 'Invalid SKU list'
    elif not all(isinstance(sku, str) and sku.strip() for sku in skus):
        errors['skus'] = 'SKUs must be non-empty strings'

    return errors

def parse_sku_list(payload: Any) -> List[str]:
    """Return the de-duplicated SKUs of a tagging payload.

    Raises:
        ValidationError if the payload is malformed
    """
    errors = validate_sku_payload(payload)
    if errors:
        raise ValidationError("Invalid SKU list", code='invalid_skus', details=errors)

    # dict.fromkeys keeps first-seen order
    return list(dict.fromkeys(payload['skus']))

def validate_sku_pattern(sku_pattern: Any) -> str:
    """Return a usable SKU prefix.

    Raises:
        ValidationError if the pattern is missing or blank
    """
    if not isinstance(sku_pattern, str) or not sku_pattern.strip():
        raise ValidationError("SKU pattern is required for a pattern link", code='invalid_pattern')
    return sku_pattern.strip()
