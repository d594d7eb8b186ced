from .validation import validate_sku_payload, parse_sku_list, validate_sku_pattern

__all__ = [
    'validate_sku_payload',
    'parse_sku_list',
    'validate_sku_pattern'
]
