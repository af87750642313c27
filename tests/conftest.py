import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from ccube.database import get_session
from ccube.main import app
from ccube.models.discount import Discount
from ccube.models.product import Product


@pytest.fixture
def engine():
    """In-memory SQLite DB for fast testing."""
    _engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(_engine)
    yield _engine
    SQLModel.metadata.drop_all(_engine)


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def client(engine):
    """FastAPI test client with get_session bound to the in-memory DB."""

    def override_get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def catalog(session):
    """
    Small storefront catalog:
      - crob01: scalar string price 100
      - crob02: size map small 150 / large 200
      - cand01: numeric price 80 with scents
      - old01:  inactive
    plus one active and one inactive "buy 3 get 1" promotion.
    """
    session.add_all(
        [
            Product(id="crob01", name="Crochet Bag 1", price="100", category="Crochet > Bags"),
            Product(
                id="crob02",
                name="Crochet Bag 2",
                price={"small": 150, "large": 200},
                sizes=["Small", "Large"],
                category="Crochet > Bags",
            ),
            Product(
                id="cand01",
                name="Lavender Candle",
                price=80,
                scents=["Lavender", "Vanilla"],
                category="Candles > Scented",
            ),
            Product(id="old01", name="Retired Bag", price="50", is_active=False),
            Discount(
                id="bags-3-1",
                name="Buy 3 Get 1 Free - Crochet Bags",
                buy_quantity=3,
                free_quantity=1,
                applicable_products=["crob01", "crob02"],
            ),
            Discount(
                id="old-promo",
                name="Expired promo",
                active=False,
                buy_quantity=1,
                free_quantity=1,
                applicable_products=["crob01"],
            ),
        ]
    )
    session.commit()
    return session
