import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def make_product():
    """Register a catalog product and return it."""
    from storefront.catalog.product import Product

    def _make(name="Basic Tee", price=10.0, **attributes):
        product = Product.register(name=name, price=price, **attributes)
        current_domain.repository_for(Product).add(product)
        return product

    return _make
