"""Pytest fixtures for storefront tests."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.security import create_token
from storefront.db.base import Base
from storefront.db.session import get_db
from storefront.models import Order, OrderItem, User, UserProfile


@pytest.fixture
def engine():
    """In-memory database shared by every session in a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    from storefront.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create a user; ``role`` adds a user_profiles row, ``metadata_role`` a claim."""

    def _make_user(role=None, metadata_role=None, app_role=None):
        user = User(
            user_metadata={"role": metadata_role} if metadata_role else {},
            app_metadata={"role": app_role} if app_role else {},
        )
        db.add(user)
        db.flush()
        if role:
            db.add(UserProfile(user_id=user.id, role=role))
        db.commit()
        return user.id

    return _make_user


@pytest.fixture
def make_order(db):
    def _make_order(user_id=None, guest_session_id=None, payment_method="razorpay",
                    payment_status="paid", delivered_at=None, status="pending"):
        if user_id is None and guest_session_id is None:
            guest_session_id = "guest-session-1"
        order = Order(
            user_id=user_id,
            guest_session_id=guest_session_id,
            payment_method=payment_method,
            payment_status=payment_status,
            delivered_at=delivered_at,
            status=status,
        )
        db.add(order)
        db.commit()
        return order.order_id

    return _make_order


@pytest.fixture
def make_item(db):
    def _make_item(order_id, status="pending", price=500.0, quantity=1, **fields):
        item = OrderItem(
            order_id=order_id,
            product_id="prod-1",
            quantity=quantity,
            price_at_purchase=price,
            size="9",
            item_status=status,
            **fields,
        )
        db.add(item)
        db.commit()
        return item.order_item_id

    return _make_item


@pytest.fixture
def auth_header():
    def _auth_header(user_id):
        return {"Authorization": f"Bearer {create_token(user_id)}"}

    return _auth_header
