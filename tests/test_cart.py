import pytest

from ishop.services.cart import Cart, CartError

from conftest import product


def test_add_increments_quantity():
    cart = Cart()
    atlas = product(stock=5)

    cart.add(atlas)
    cart.add(atlas)

    assert len(cart.lines) == 1
    assert cart.lines[0].quantity == 2
    assert cart.count == 2
    assert cart.total == 1998


def test_cannot_add_sold_out_product():
    with pytest.raises(CartError):
        Cart().add(product(stock=0))


def test_update_quantity_rules():
    cart = Cart()
    atlas = product(stock=3)
    cart.add(atlas)

    assert cart.update_quantity(atlas, 0) is False
    assert cart.lines[0].quantity == 1

    with pytest.raises(CartError, match="Cannot exceed available stock."):
        cart.update_quantity(atlas, 4)

    assert cart.update_quantity(atlas, 3) is True
    assert cart.lines[0].quantity == 3


def test_remove_and_clear():
    cart = Cart()
    cart.add(product(id="1"))
    cart.add(product(id="2", price=1299))

    cart.remove("1")
    assert [line.product.id for line in cart.lines] == ["2"]

    cart.clear()
    assert cart.is_empty()


def test_validate_against_current_stock():
    cart = Cart()
    atlas = product(stock=5)
    cart.add(atlas)
    cart.update_quantity(atlas, 4)

    with pytest.raises(CartError, match="Only 2"):
        cart.validate({"1": product(stock=2)})

    cart.validate({"1": product(stock=10, price=899)})
    assert cart.total == 4 * 899


def test_validate_empty_cart():
    with pytest.raises(CartError):
        Cart().validate({})
