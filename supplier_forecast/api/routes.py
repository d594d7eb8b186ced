"""
Routes for the supplier production forecast.

This module provides the portal endpoints that list the SKUs a supplier
should produce and let the supplier tag or untag them as in production.
"""
from flask import Blueprint, current_app, g, jsonify, request

from supplier_forecast.api.auth import authenticate_supplier, issue_portal_token, supplier_required
from supplier_forecast.db import session_scope
from supplier_forecast.exceptions import SupplierForecastError, ValidationError
from supplier_forecast.services.forecast_service import ForecastService
from supplier_forecast.services.production_tag_service import ProductionTagService
from supplier_forecast.services.supplier_link_service import SupplierLinkService
from supplier_forecast.utils.validation import parse_sku_list

forecast_bp = Blueprint('supplier_forecast', __name__, url_prefix='/api/supplier-forecast')
portal_bp = Blueprint('portal', __name__, url_prefix='/api/portal')
health_bp = Blueprint('health', __name__, url_prefix='/api')


@forecast_bp.route('/', methods=['GET'], strict_slashes=False)
@supplier_required
def get_forecast():
    """Get the prioritized production list of the logged-in supplier."""
    try:
        filter_mode = request.args.get('filter', 'all')

        with session_scope() as session:
            result = ForecastService(session).get_forecast(g.supplier_id, filter_mode)

        return jsonify(result.to_dict())

    except SupplierForecastError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error generating forecast: {e}")
        return jsonify({
            'success': False,
            'error': 'Failed to generate forecast'
        }), 500


@forecast_bp.route('/mark-production', methods=['POST'])
@supplier_required
def mark_production():
    """Tag SKUs as in production."""
    skus = parse_sku_list(request.get_json(silent=True))

    try:
        with session_scope() as session:
            supplier = SupplierLinkService(session).get_supplier(g.supplier_id)
            marked = ProductionTagService(session).mark_in_production(supplier, skus)

        return jsonify({
            'message': f"{marked} product(s) marked as in production",
            'marked': marked,
            'skipped': len(skus) - marked
        })

    except SupplierForecastError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error marking production: {e}")
        return jsonify({
            'success': False,
            'error': 'Failed to mark products'
        }), 500


@forecast_bp.route('/unmark-production', methods=['POST'])
@supplier_required
def unmark_production():
    """Remove the production tag from SKUs."""
    skus = parse_sku_list(request.get_json(silent=True))

    try:
        with session_scope() as session:
            supplier = SupplierLinkService(session).get_supplier(g.supplier_id)
            unmarked = ProductionTagService(session).unmark_production(supplier.id, skus)

        return jsonify({
            'message': f"{unmarked} product(s) unmarked",
            'unmarked': unmarked
        })

    except SupplierForecastError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error unmarking production: {e}")
        return jsonify({
            'success': False,
            'error': 'Failed to unmark products'
        }), 500


@forecast_bp.route('/links', methods=['GET'])
@supplier_required
def get_links():
    """Get the products and SKU patterns linked to the logged-in supplier."""
    try:
        with session_scope() as session:
            summary = SupplierLinkService(session).get_link_summary(g.supplier_id)

        return jsonify(summary)

    except SupplierForecastError:
        raise
    except Exception as e:
        current_app.logger.error(f"Error fetching supplier links: {e}")
        return jsonify({
            'success': False,
            'error': 'Failed to fetch linked products'
        }), 500


@portal_bp.route('/login', methods=['POST'])
def login():
    """Log a supplier into the portal."""
    data = request.get_json(silent=True) or {}
    portal_id = data.get('portal_id')
    password = data.get('password')

    if not portal_id or not password:
        raise ValidationError("Portal ID and password are required", code='missing_credentials')

    with session_scope() as session:
        supplier = authenticate_supplier(session, portal_id, password)
        token = issue_portal_token(supplier, current_app.config['PORTAL_SECRET_KEY'])
        supplier_info = {
            'id': supplier.id,
            'portal_id': supplier.portal_id,
            'name': supplier.name,
            'status': str(supplier.status)
        }

    current_app.logger.info(f"Supplier {supplier_info['id']} logged into the portal")

    return jsonify({
        'message': 'Login successful',
        'token': token,
        'supplier': supplier_info
    })


@health_bp.route('/health', methods=['GET'])
def health():
    """Liveness check."""
    return jsonify({'status': 'ok'})
