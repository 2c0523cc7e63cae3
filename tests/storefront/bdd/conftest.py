"""Shared BDD fixtures and step definitions for the storefront pricing scenarios."""

import pytest
from protean.exceptions import ProteanException
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart
from storefront.catalog.product import Product


@pytest.fixture()
def products():
    """Catalog products registered by the scenario, keyed by name."""
    return {}


@pytest.fixture()
def outcome():
    """Container for the last result or refusal."""
    return {"result": None, "exc": None}


def _register(products, name, price, sizes=()):
    product = Product.register(name=name, price=price, sizes=list(sizes))
    current_domain.repository_for(Product).add(product)
    products[name] = product


def _add(outcome, products, user_id, quantity, name, size=None):
    outcome["exc"] = None
    try:
        current_domain.process(
            AddToCart(user_id=user_id, product_id=products[name].id, quantity=quantity, selected_size=size),
            asynchronous=False,
        )
    except ProteanException as exc:
        outcome["exc"] = exc


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:f} in sizes "{sizes}"'))
def product_with_sizes(products, name, price, sizes):
    _register(products, name, price, sizes.split(","))


@given(parsers.cfparse('a product "{name}" priced {price:f}'))
def product_without_sizes(products, name, price):
    _register(products, name, price)


# ---------------------------------------------------------------------------
# When steps (also usable as Given)
# ---------------------------------------------------------------------------
@given(parsers.cfparse('"{user_id}" adds {quantity:d} of "{name}" in size "{size}"'))
@when(parsers.cfparse('"{user_id}" adds {quantity:d} of "{name}" in size "{size}"'))
def add_sized(products, outcome, user_id, quantity, name, size):
    _add(outcome, products, user_id, quantity, name, size)


@given(parsers.cfparse('"{user_id}" adds {quantity:d} of "{name}" with no size'))
@when(parsers.cfparse('"{user_id}" adds {quantity:d} of "{name}" with no size'))
def add_unsized(products, outcome, user_id, quantity, name):
    _add(outcome, products, user_id, quantity, name)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request is refused with "{error_name}"'))
def refused_with(outcome, error_name):
    assert outcome["exc"] is not None
    assert type(outcome["exc"]).__name__ == error_name


@then(parsers.cfparse('the cart of "{user_id}" has {count:d} line totalling {total:f}'))
@then(parsers.cfparse('the cart of "{user_id}" has {count:d} lines totalling {total:f}'))
def cart_totals(user_id, count, total):
    cart = current_domain.repository_for(Cart).find_for_user(user_id)
    items = cart.items if cart else []
    total_price = cart.total_price if cart else 0.0

    assert len(items) == count
    assert total_price == pytest.approx(total)
