"""
Main entry point for the Supplier Forecast service.

This script provides command-line access to the production forecast,
production tagging, supplier link maintenance and the portal API server.
"""
import argparse
import sys

from tabulate import tabulate

from supplier_forecast.config import config
from supplier_forecast.db import initialize, session_scope
from supplier_forecast.exceptions import SupplierForecastError
from supplier_forecast.logging_setup import get_logger

log = get_logger('cli')


def init_application():
    """Initialize the database by creating tables.

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        initialize()
        log.info("Supplier Forecast database initialized")
        return True

    except SupplierForecastError as e:
        log.error(f"Error initializing database: {e}")
        return False


def show_forecast(supplier_id, filter_mode='all'):
    """Print the production forecast of a supplier.

    Args:
        supplier_id (int): Supplier ID
        filter_mode (str): all, with_tag or without_tag

    Returns:
        dict: Serialized forecast result
    """
    from supplier_forecast.services.forecast_service import ForecastService

    with session_scope() as session:
        result = ForecastService(session).get_forecast(supplier_id, filter_mode)

    if result.message:
        print(result.message)

    if result.items:
        table_data = [
            [
                item.sku,
                item.product_name,
                item.abc_curve.value,
                item.reason.value,
                item.current_stock,
                f"{item.avg_daily_sales:.2f}",
                item.quantity_needed,
                item.priority_score,
                'Yes' if item.is_in_production else 'No'
            ]
            for item in result.items
        ]
        print(f"\nProduction forecast (sales month {result.latest_data_month}):")
        print(tabulate(table_data, headers=[
            'SKU', 'Product', 'ABC', 'Reason', 'Stock', 'Avg/Day', 'Qty Needed', 'Priority', 'In Production'
        ]))

    print(f"\nTotal: {result.total}  In production: {result.in_production}")
    return result.to_dict()


def tag_production(supplier_id, skus, in_production=True):
    """Tag or untag SKUs as in production.

    Returns:
        int: Number of SKUs changed
    """
    from supplier_forecast.services.production_tag_service import ProductionTagService
    from supplier_forecast.services.supplier_link_service import SupplierLinkService

    with session_scope() as session:
        supplier = SupplierLinkService(session).get_supplier(supplier_id)
        tag_service = ProductionTagService(session)

        if in_production:
            changed = tag_service.mark_in_production(supplier, skus)
            print(f"{changed} product(s) marked as in production")
        else:
            changed = tag_service.unmark_production(supplier.id, skus)
            print(f"{changed} product(s) unmarked")

    return changed


def list_links(supplier_id):
    """Print the products and SKU patterns linked to a supplier."""
    from supplier_forecast.services.supplier_link_service import SupplierLinkService

    with session_scope() as session:
        summary = SupplierLinkService(session).get_link_summary(supplier_id)

    if summary['products']:
        print("\nLinked products:")
        print(tabulate(
            [[p['link_id'], p['id'], p['sku'], p['name'], p['stock']] for p in summary['products']],
            headers=['Link ID', 'Product ID', 'SKU', 'Name', 'Stock']
        ))

    if summary['sku_patterns']:
        print("\nSKU patterns:")
        print(tabulate(
            [[p['id'], p['pattern']] for p in summary['sku_patterns']],
            headers=['Link ID', 'Pattern']
        ))

    print(f"\nTotal linked products: {summary['total_linked']}")
    return summary


def manage_link(args):
    """Add or remove a supplier link from command-line arguments."""
    from supplier_forecast.services.supplier_link_service import SupplierLinkService

    with session_scope() as session:
        service = SupplierLinkService(session)

        if args.link_product is not None:
            link = service.add_individual_link(args.supplier_id, args.link_product)
            print(f"Product {args.link_product} linked (link {link.id})")
        elif args.link_pattern is not None:
            link = service.add_pattern_link(args.supplier_id, args.link_pattern)
            print(f"Pattern '{link.sku_pattern}' linked (link {link.id})")
        elif args.unlink is not None:
            service.remove_link(args.supplier_id, args.unlink)
            print(f"Link {args.unlink} removed")


def issue_token(supplier_id):
    """Print a portal token for a supplier."""
    from supplier_forecast.api.auth import issue_portal_token
    from supplier_forecast.services.supplier_link_service import SupplierLinkService

    with session_scope() as session:
        supplier = SupplierLinkService(session).get_supplier(supplier_id)
        token = issue_portal_token(supplier, config.portal_config['secret_key'])

    print(token)
    return token


def run_server(host, port, debug=False):
    """Run the portal API with the Flask development server."""
    from supplier_forecast.api import create_app

    app = create_app()
    log.info(f"Starting Supplier Forecast API on {host}:{port}")
    app.run(host=host, port=port, debug=debug)


def parse_arguments(argv=None):
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments
    """
    parser = argparse.ArgumentParser(description='Supplier Forecast')
    parser.add_argument('--init', action='store_true', help='Initialize the database')
    parser.add_argument('--serve', action='store_true', help='Run the portal API server')
    parser.add_argument('--host', default='127.0.0.1', help='API server host')
    parser.add_argument('--port', type=int, default=5000, help='API server port')
    parser.add_argument('--debug', action='store_true', help='Run the API server in debug mode')
    parser.add_argument('--forecast', type=int, metavar='SUPPLIER_ID', help='Show the production forecast of a supplier')
    parser.add_argument('--filter', default='all', choices=['all', 'with_tag', 'without_tag'], help='Forecast filter')
    parser.add_argument('--supplier-id', type=int, help='Supplier ID for tagging and link commands')
    parser.add_argument('--mark', nargs='+', metavar='SKU', help='Mark SKUs as in production')
    parser.add_argument('--unmark', nargs='+', metavar='SKU', help='Remove the production tag from SKUs')
    parser.add_argument('--list-links', action='store_true', help='List the links of a supplier')
    parser.add_argument('--link-product', type=int, metavar='PRODUCT_ID', help='Link a product to a supplier')
    parser.add_argument('--link-pattern', metavar='PREFIX', help='Link a SKU prefix to a supplier')
    parser.add_argument('--unlink', type=int, metavar='LINK_ID', help='Remove a supplier link')
    parser.add_argument('--issue-token', type=int, metavar='SUPPLIER_ID', help='Print a portal token for a supplier')

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for the Supplier Forecast service."""
    args = parse_arguments(argv)

    needs_supplier = (
        args.mark or args.unmark or args.list_links
        or args.link_product is not None or args.link_pattern is not None or args.unlink is not None
    )
    if needs_supplier and args.supplier_id is None:
        print("--supplier-id is required for tagging and link commands.")
        return 2

    try:
        if args.init and not init_application():
            return 1

        if args.forecast is not None:
            show_forecast(args.forecast, args.filter)

        if args.mark:
            tag_production(args.supplier_id, args.mark, in_production=True)

        if args.unmark:
            tag_production(args.supplier_id, args.unmark, in_production=False)

        if args.link_product is not None or args.link_pattern is not None or args.unlink is not None:
            manage_link(args)

        if args.list_links:
            list_links(args.supplier_id)

        if args.issue_token is not None:
            issue_token(args.issue_token)

    except SupplierForecastError as e:
        log.error(str(e))
        print(f"Error: {e.message}")
        return 1

    if args.serve:
        run_server(args.host, args.port, args.debug)

    if not any([args.init, args.serve, args.forecast is not None, needs_supplier, args.issue_token is not None]):
        print("No action specified. Use --help for available options.")

    return 0

if __name__ == '__main__':
    sys.exit(main())
