"""Inventory pre-check, commit and restock over the product catalogue.

The pre-check runs before payment and is advisory only. The commit runs
right after the order is written and is the authority: under the product
locks it re-reads every product, verifies every line, and only then
decrements. All product writes for one order go through a single command,
so a failed commit leaves all stock untouched.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product
from ordering.domain import ordering
from ordering.errors import InsufficientStockError, InventoryCommitError, StockShortage
from ordering.inventory.locks import stock_locks

logger = structlog.get_logger(__name__)


def _quantities(lines) -> dict[str, int]:
    totals: dict[str, int] = {}
    for line in lines:
        key = str(line.product_id)
        totals[key] = totals.get(key, 0) + line.quantity
    return totals


def _names(lines) -> dict[str, str]:
    return {str(line.product_id): line.name for line in lines}


def _shortages(quantities: dict[str, int], products: dict, names: dict[str, str]) -> list[StockShortage]:
    shortages = []
    for product_id, requested in quantities.items():
        product = products[product_id]
        if not product.has_stock_for(requested):
            shortages.append(
                StockShortage(
                    product_id=product_id,
                    name=names.get(product_id) or product.name,
                    requested=requested,
                    available=product.stock_count or 0,
                )
            )
    return shortages


def _lines_payload(order) -> str:
    names = {str(item.product_id): item.name for item in order.items}
    return json.dumps(
        [
            {"product_id": product_id, "name": names.get(product_id), "quantity": quantity}
            for product_id, quantity in order.quantities().items()
        ]
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@ordering.command(part_of="Product")
class CommitStock:
    """Decrement stock for every line of a just-placed order."""

    order_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of {product_id, name, quantity}


@ordering.command(part_of="Product")
class RestockOrder:
    """Return every line of a cancelled order to stock."""

    order_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of {product_id, name, quantity}


@ordering.command_handler(part_of=Product)
class StockCommitmentHandler:
    @handle(CommitStock)
    def commit_stock(self, command):
        lines = json.loads(command.lines)
        quantities = {line["product_id"]: line["quantity"] for line in lines}
        repo = current_domain.repository_for(Product)

        products = {}
        for product_id in quantities:
            try:
                products[product_id] = repo.get(product_id)
            except ObjectNotFoundError as exc:
                logger.error("Product vanished before stock commit", order_id=command.order_id, product_id=product_id)
                raise InventoryCommitError(product_id, "product not found at commit time") from exc

        shortages = _shortages(quantities, products, {line["product_id"]: line["name"] for line in lines})
        if shortages:
            logger.warning(
                "Stock commit failed",
                order_id=command.order_id,
                products=[shortage.product_id for shortage in shortages],
            )
            raise InsufficientStockError(shortages)

        for product_id, quantity in quantities.items():
            product = products[product_id]
            product.commit_stock(quantity)
            repo.add(product)

    @handle(RestockOrder)
    def restock_order(self, command):
        repo = current_domain.repository_for(Product)
        for line in json.loads(command.lines):
            try:
                product = repo.get(line["product_id"])
            except ObjectNotFoundError:
                logger.warning("Cannot restock missing product", order_id=command.order_id, product_id=line["product_id"])
                continue
            product.restock(line["quantity"])
            repo.add(product)


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------
def precheck(lines, products: dict) -> None:
    """Reject the cart early if any line exceeds current stock.

    Raises:
        InsufficientStockError: listing every short product.
    """
    shortages = _shortages(_quantities(lines), products, _names(lines))
    if shortages:
        logger.info(
            "Stock pre-check rejected cart",
            products=[shortage.product_id for shortage in shortages],
        )
        raise InsufficientStockError(shortages)


def commit_inventory(order) -> None:
    """Decrement stock for every line of a persisted order, all or nothing.

    The product locks are held until the command's unit of work has
    committed, so a concurrent commit always reads the updated counters.

    Raises:
        InventoryCommitError: a product no longer exists.
        InsufficientStockError: stock dropped below an ordered quantity
            since the pre-check.
    """
    quantities = order.quantities()
    with stock_locks.hold(quantities.keys()):
        current_domain.process(
            CommitStock(order_id=str(order.id), lines=_lines_payload(order)),
            asynchronous=False,
        )

    logger.info("Stock committed", order_id=str(order.id), lines=len(quantities))


def restock(order) -> None:
    """Return every line's quantity to stock. Missing products are skipped."""
    quantities = order.quantities()
    with stock_locks.hold(quantities.keys()):
        current_domain.process(
            RestockOrder(order_id=str(order.id), lines=_lines_payload(order)),
            asynchronous=False,
        )

    logger.info("Stock restored", order_id=str(order.id), lines=len(quantities))
