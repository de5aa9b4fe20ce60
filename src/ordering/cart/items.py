"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import CustomerCart, cart_for
from ordering.catalogue.product import CatalogLookup
from ordering.domain import ordering


@ordering.command(part_of="CustomerCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="CustomerCart")
class UpdateCartQuantity:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="CustomerCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.command(part_of="CustomerCart")
class ClearCart:
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=CustomerCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = CatalogLookup().get(command.product_id)
        cart = cart_for(command.customer_id)
        cart.add_item(
            product_id=str(product.id),
            name=product.name,
            unit_price=product.price,
            quantity=command.quantity,
            image=product.image,
            available=product.stock_count,
        )
        current_domain.repository_for(CustomerCart).add(cart)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = cart_for(command.customer_id)
        cart.update_quantity(command.product_id, command.quantity)
        current_domain.repository_for(CustomerCart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = cart_for(command.customer_id)
        cart.remove_item(command.product_id)
        current_domain.repository_for(CustomerCart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = cart_for(command.customer_id)
        cart.clear()
        current_domain.repository_for(CustomerCart).add(cart)
