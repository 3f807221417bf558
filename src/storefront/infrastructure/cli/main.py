import click

from storefront.config.logging import configure_logging
from storefront.config.settings import get_settings
from storefront.infrastructure.bootstrap import open_store
from storefront.infrastructure.cli.inventory_commands import (
    inventory_adjust,
    inventory_fix_delivery,
    inventory_history,
    inventory_resync,
    inventory_set,
    inventory_show,
)
from storefront.infrastructure.cli.order_commands import (
    order_create,
    order_delete,
    order_impact,
    order_show,
    order_status,
)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Storefront: orders and inventory reservations."""
    configure_logging()
    store = open_store(get_settings())
    ctx.obj = store
    ctx.call_on_close(store.disconnect)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def inventory() -> None:
    """Manage inventory."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_impact)
order.add_command(order_show)
order.add_command(order_status)
inventory.add_command(inventory_adjust)
inventory.add_command(inventory_fix_delivery)
inventory.add_command(inventory_history)
inventory.add_command(inventory_resync)
inventory.add_command(inventory_set)
inventory.add_command(inventory_show)
