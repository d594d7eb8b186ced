"""
Supplier portal authentication.

Suppliers log in with their portal id and password and receive a signed,
time-limited token. Protected routes read it from the Authorization header
and expose the supplier id as ``g.supplier_id``.
"""
from functools import wraps

from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from supplier_forecast.exceptions import AuthenticationError, AuthorizationError
from supplier_forecast.models import Supplier, SupplierStatus

TOKEN_SALT = 'supplier-portal'


def _serializer(secret_key):
    return URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)


def hash_password(password):
    """Hash a portal password for storage."""
    return generate_password_hash(password)


def issue_portal_token(supplier, secret_key):
    """Create a signed token for a supplier.

    Args:
        supplier: Supplier object
        secret_key: Signing key

    Returns:
        Token string
    """
    return _serializer(secret_key).dumps({
        'supplier_id': supplier.id,
        'portal_id': supplier.portal_id
    })


def verify_portal_token(token, secret_key, max_age):
    """Validate a portal token.

    Args:
        token: Token string
        secret_key: Signing key
        max_age: Maximum token age in seconds

    Returns:
        Supplier ID carried by the token

    Raises:
        AuthenticationError if the token is invalid or expired
    """
    try:
        payload = _serializer(secret_key).loads(token, max_age=max_age)
    except SignatureExpired:
        raise AuthenticationError("Token expired", code='token_expired')
    except BadSignature:
        raise AuthenticationError("Invalid token", code='invalid_token')

    supplier_id = payload.get('supplier_id') if isinstance(payload, dict) else None
    if not isinstance(supplier_id, int):
        raise AuthenticationError("Invalid token", code='invalid_token')

    return supplier_id


def authenticate_supplier(session: Session, portal_id, password) -> Supplier:
    """Check portal credentials.

    Raises:
        AuthenticationError if the credentials are wrong
        AuthorizationError if the supplier account is inactive
    """
    supplier = session.query(Supplier).filter(Supplier.portal_id == portal_id).first()

    if not supplier or not supplier.portal_password_hash:
        raise AuthenticationError("Invalid credentials", code='invalid_credentials')

    if not check_password_hash(supplier.portal_password_hash, password):
        raise AuthenticationError("Invalid credentials", code='invalid_credentials')

    if supplier.status != SupplierStatus.ACTIVE:
        raise AuthorizationError(
            "Your account is inactive. Contact the administrator.",
            code='supplier_inactive'
        )

    return supplier


def get_bearer_token():
    """Extract the bearer token from the request, or None."""
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None
    return auth_header[7:].strip() or None


def supplier_required(view):
    """Reject the request unless it carries a valid portal token."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        token = get_bearer_token()
        if not token:
            raise AuthenticationError("Token not provided", code='missing_token')

        g.supplier_id = verify_portal_token(
            token,
            current_app.config['PORTAL_SECRET_KEY'],
            current_app.config['PORTAL_TOKEN_MAX_AGE']
        )
        return view(*args, **kwargs)

    return wrapped
