"""CLI commands for the Order aggregate."""

from __future__ import annotations

import json

import click

from storefront.application.create_order import CreateOrderHandler
from storefront.application.delete_order import DeleteOrderHandler
from storefront.application.dto import OrderDTO, OrderSubmission
from storefront.application.results import Result, capture
from storefront.application.show_order import ShowOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.order import OrderStatus
from storefront.infrastructure.bootstrap import inventory_repository, order_repository
from storefront.infrastructure.persistence.document_store import JsonDocumentStore


def _emit_json(result: Result) -> None:
    """Print the tagged result; a failure exits non-zero."""
    click.echo(json.dumps(result.to_dict(), indent=2))
    if not result.success:
        raise click.exceptions.Exit(1)


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id} {dto.order_number}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"Customer: {dto.customer_name}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.tracking_number:
        click.echo(f"Tracking: {dto.tracking_number}")
    if dto.notes:
        click.echo(f"Notes:    {dto.notes}")
    click.echo()
    click.echo(f"  {'Product':<24} {'Size':<5} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*66}")
    for item in dto.items:
        click.echo(
            f"  {item.title:<24} {item.size or '':<5} {item.quantity:>5} "
            f"{item.price:>14} {item.line_total:>14}"
        )
    click.echo(f"  {'-'*66}")
    click.echo(f"  {'Subtotal':<36} {dto.subtotal:>29}")
    click.echo(f"  {'Discount':<36} {dto.discount_total:>29}")
    click.echo(f"  {'Shipping':<36} {dto.shipping_charge:>29}")
    click.echo(f"  {'Order Total':<36} {dto.total:>29}")


@click.command("create")
@click.option(
    "--payload", required=True, type=click.File("r"),
    help="Checkout body as JSON ('-' for stdin).",
)
@click.option("--by", "performed_by", default=None, help="Who placed the order.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
@click.pass_obj
def order_create(store: JsonDocumentStore, payload, performed_by: str | None, as_json: bool) -> None:
    """Place an order and reserve its stock."""
    try:
        body = json.load(payload)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Payload is not valid JSON: {exc}", param_hint="--payload")

    handler = CreateOrderHandler(
        order_repo=order_repository(store),
        inventory_repo=inventory_repository(store),
        transactions=store,
    )

    def _create() -> OrderDTO:
        return handler.handle(OrderSubmission.from_payload(body), performed_by=performed_by)

    if as_json:
        _emit_json(capture(_create))
        return

    try:
        dto = _create()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} {dto.order_number} created, stock reserved.")
    click.echo()
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(store: JsonDocumentStore, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository(store))

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option(
    "--status", "new_status", required=True,
    type=click.Choice([s.value for s in OrderStatus]), help="New order status.",
)
@click.option("--notes", default=None, help="Replace the order notes.")
@click.option("--tracking", "tracking_number", default=None, help="Courier tracking number.")
@click.option("--by", "performed_by", default=None, help="Admin recorded in inventory history.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
@click.pass_obj
def order_status(
    store: JsonDocumentStore,
    order_id: int,
    new_status: str,
    notes: str | None,
    tracking_number: str | None,
    performed_by: str | None,
    as_json: bool,
) -> None:
    """Move an order to a new status (updates inventory accordingly)."""
    handler = UpdateOrderStatusHandler(
        order_repo=order_repository(store),
        inventory_repo=inventory_repository(store),
        transactions=store,
    )

    def _update():
        return handler.handle(
            order_id,
            new_status,
            notes=notes,
            tracking_number=tracking_number,
            performed_by=performed_by,
        )

    if as_json:
        _emit_json(capture(_update))
        return

    try:
        result = _update()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    suffix = " and inventory updated" if result.inventory_updated else ""
    click.echo(f"Order #{order_id} status updated to {result.order.status}{suffix}.")


@click.command("delete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to delete.")
@click.option("--by", "performed_by", default=None, help="Admin recorded in inventory history.")
@click.confirmation_option(prompt="Delete this order?")
@click.pass_obj
def order_delete(store: JsonDocumentStore, order_id: int, performed_by: str | None) -> None:
    """Delete an order (releases its reservation if still open)."""
    handler = DeleteOrderHandler(
        order_repo=order_repository(store),
        inventory_repo=inventory_repository(store),
        transactions=store,
    )

    try:
        handler.handle(order_id, performed_by=performed_by)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} deleted.")


@click.command("impact")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to inspect.")
@click.pass_obj
def order_impact(store: JsonDocumentStore, order_id: int) -> None:
    """Show what an order currently does to stock."""
    handler = ShowOrderHandler(
        order_repo=order_repository(store),
        inventory_repo=inventory_repository(store),
    )

    try:
        lines = handler.inventory_impact(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"{'Product':<24} {'Qty':>5} {'Impact':<10} {'Change':>7} "
        f"{'Stock':>7} {'Reserved':>9} {'Available':>10}"
    )
    click.echo("-" * 78)
    for line in lines:
        click.echo(
            f"{line.title:<24} {line.quantity:>5} {line.stock_impact:<10} {line.stock_change:>7} "
            f"{_num(line.current_stock):>7} {_num(line.reserved_stock):>9} "
            f"{_num(line.available_stock):>10}"
        )


def _num(value: int | None) -> str:
    return "-" if value is None else str(value)
