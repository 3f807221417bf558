"""CLI commands for inventory management."""

from __future__ import annotations

import click

from storefront.application.adjust_stock import AdjustStockHandler
from storefront.application.reconciliation import ReconciliationJob
from storefront.application.set_inventory import SetInventoryHandler
from storefront.application.show_inventory import ShowInventoryHandler
from storefront.config.settings import get_settings
from storefront.domain.exceptions import DomainException
from storefront.domain.model.inventory import MANUAL_MOVEMENT_TYPES, InventoryStatus
from storefront.infrastructure.bootstrap import inventory_repository, order_repository
from storefront.infrastructure.persistence.document_store import JsonDocumentStore


@click.command("set")
@click.option("--product-id", required=True, help="Product identifier.")
@click.option("--title", default=None, help="Product title (required for a new product).")
@click.option("--quantity", required=True, type=int, help="Physical units on hand.")
@click.option("--threshold", type=int, default=None, help="Low-stock threshold.")
@click.option(
    "--managed/--unmanaged", "manage_stock", default=None,
    help="Turn stock tracking on or off (new products are managed).",
)
@click.option("--by", "performed_by", default=None, help="Admin recorded in history.")
@click.pass_obj
def inventory_set(
    store: JsonDocumentStore,
    product_id: str,
    title: str | None,
    quantity: int,
    threshold: int | None,
    manage_stock: bool | None,
    performed_by: str | None,
) -> None:
    """Set the stock level for a product (registers it if new)."""
    repo = inventory_repository(store)
    if threshold is None and repo.get_by_product_id(product_id) is None:
        threshold = get_settings().low_stock_threshold

    handler = SetInventoryHandler(inventory_repo=repo, transactions=store)

    try:
        ledger = handler.handle(
            product_id,
            quantity,
            title=title,
            low_stock_threshold=threshold,
            manage_stock=manage_stock,
            performed_by=performed_by,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Inventory for '{ledger.title}' set to {ledger.stock_quantity} "
        f"(available {ledger.available_quantity}, {ledger.inventory_status.value})"
    )


@click.command("adjust")
@click.option("--product-id", required=True, help="Product identifier.")
@click.option("--delta", required=True, type=int, help="Units to add (positive) or remove (negative).")
@click.option("--reason", default=None, help="Why the stock changed.")
@click.option(
    "--type", "movement_type", default=None,
    type=click.Choice(sorted(t.value for t in MANUAL_MOVEMENT_TYPES)),
    help="History entry type (defaults by sign).",
)
@click.option("--by", "performed_by", default=None, help="Admin recorded in history.")
@click.pass_obj
def inventory_adjust(
    store: JsonDocumentStore,
    product_id: str,
    delta: int,
    reason: str | None,
    movement_type: str | None,
    performed_by: str | None,
) -> None:
    """Add or remove physical stock by hand."""
    handler = AdjustStockHandler(inventory_repo=inventory_repository(store), transactions=store)

    try:
        ledger = handler.handle(
            product_id,
            delta,
            reason=reason,
            movement_type=movement_type,
            performed_by=performed_by,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"'{ledger.title}': stock {ledger.stock_quantity}, "
        f"reserved {ledger.reserved_quantity}, available {ledger.available_quantity}"
    )


@click.command("show")
@click.option(
    "--status", default=None,
    type=click.Choice([s.value for s in InventoryStatus]),
    help="Only show managed products in this state.",
)
@click.pass_obj
def inventory_show(store: JsonDocumentStore, status: str | None) -> None:
    """Show current inventory levels."""
    handler = ShowInventoryHandler(inventory_repo=inventory_repository(store))

    try:
        lines = handler.handle(status=status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(
        f"{'Product':<24} {'Stock':>7} {'Reserved':>9} {'Available':>10} {'Status':<13}"
    )
    click.echo("-" * 67)
    for line in lines:
        status_label = line.status if line.managed else "unmanaged"
        click.echo(
            f"{line.title:<24} {line.stock:>7} {line.reserved:>9} "
            f"{line.available:>10} {status_label:<13}"
        )


@click.command("history")
@click.option("--product-id", required=True, help="Product identifier.")
@click.pass_obj
def inventory_history(store: JsonDocumentStore, product_id: str) -> None:
    """Show the stock movement history of a product."""
    handler = ShowInventoryHandler(inventory_repo=inventory_repository(store))

    try:
        entries = handler.history(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not entries:
        click.echo("No history recorded.")
        return

    for entry in entries:
        who = f" by {entry.performed_by}" if entry.performed_by else ""
        click.echo(
            f"{entry.date}  {entry.type:<11} {entry.quantity:>5}  "
            f"{entry.previous_quantity} -> {entry.new_quantity}  {entry.reason}{who}"
        )


@click.command("resync")
@click.option("--by", "performed_by", default=None, help="Admin recorded in history.")
@click.pass_obj
def inventory_resync(store: JsonDocumentStore, performed_by: str | None) -> None:
    """Recompute reserved stock from open orders."""
    job = ReconciliationJob(
        order_repo=order_repository(store),
        inventory_repo=inventory_repository(store),
        transactions=store,
    )

    try:
        report = job.resync(performed_by=performed_by)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Checked {report.products_checked} product(s), "
        f"corrected {len(report.changes)}."
    )
    for change in report.changes:
        click.echo(
            f"  {change.title}: reserved {change.previous_reserved} -> {change.new_reserved} "
            f"(available {change.available}, {change.status})"
        )


@click.command("fix-delivery")
@click.option("--order-id", required=True, type=int, help="Delivered order to clean up.")
@click.option("--by", "performed_by", default=None, help="Admin recorded in history.")
@click.pass_obj
def inventory_fix_delivery(store: JsonDocumentStore, order_id: int, performed_by: str | None) -> None:
    """Release reservation left behind by a delivered order."""
    job = ReconciliationJob(
        order_repo=order_repository(store),
        inventory_repo=inventory_repository(store),
        transactions=store,
    )

    try:
        fixes = job.fix_delivery_drift(order_id, performed_by=performed_by)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not fixes:
        click.echo(f"Order #{order_id}: nothing to release.")
        return

    for fix in fixes:
        click.echo(
            f"  {fix.title}: released {fix.released} "
            f"(reserved {fix.reserved_after}, available {fix.available_after})"
        )
