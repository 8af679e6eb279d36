import datetime
import json
import os

# Keep the app module away from the on-disk database during tests.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import main
import models
from database import Base, get_db
from pricing_logic import PriceEstimator


VALID_MODEL_REPLY = {
    "estimatedPrice": 950000,
    "priceRange": {"min": 900000, "max": 1000000},
    "confidence": 88,
    "factors": {
        "location": 90,
        "size": 70,
        "bedrooms": 65,
        "bathrooms": 60,
        "amenities": 75,
        "market": 82,
    },
    "comparableProperties": [
        {"price": 940000, "distance": "0.3 miles", "similarity": 91},
        {"price": 975000, "distance": "0.7 miles", "similarity": 87},
        {"price": 910000, "distance": "1.1 miles", "similarity": 80},
    ],
}


class StubModelCaller:
    """Stands in for the remote model: returns canned text or raises."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def call_model(self, system_instruction, user_prompt):
        self.calls.append((system_instruction, user_prompt))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def model_reply():
    return json.loads(json.dumps(VALID_MODEL_REPLY))


@pytest.fixture
def stub_caller(model_reply):
    return StubModelCaller(reply=json.dumps(model_reply))


@pytest.fixture
def estimator(stub_caller):
    return PriceEstimator(stub_caller)


@pytest.fixture
def valid_payload():
    return {
        'propertyType': 'villa',
        'bedrooms': 4,
        'bathrooms': 3.5,
        'areaSqft': 2000,
        'city': 'Miami',
        'state': 'FL',
    }


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session, estimator):
    def override_get_db():
        yield db_session

    main.app.dependency_overrides[get_db] = override_get_db
    main.app.dependency_overrides[main.get_estimator] = lambda: estimator
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()


def make_listing(**overrides):
    fields = {
        'title': 'Test Listing',
        'property_type': 'apartment',
        'price': 500000.0,
        'area_sqft': 1000,
        'bedrooms': 2,
        'bathrooms': 1.0,
        'address': '1 Test Street',
        'city': 'Chicago',
        'state': 'IL',
        'amenities': [],
        'images': [],
        'status': 'available',
    }
    fields.update(overrides)
    return models.Property(**fields)


@pytest.fixture
def sample_listings(db_session):
    base_time = datetime.datetime(2025, 9, 1, 12, 0, 0)
    listings = [
        make_listing(
            title='Modern Downtown Apartment', property_type='apartment', price=750000.0,
            area_sqft=1200, bedrooms=2, bathrooms=2.0, address='123 Main Street',
            city='New York', state='NY', zipcode='10001', amenities=['Gym', 'Elevator'],
            created_at=base_time,
        ),
        make_listing(
            title='Luxury Villa with Garden', property_type='villa', price=1250000.0,
            area_sqft=2500, bedrooms=4, bathrooms=3.0, address='456 Oak Avenue',
            city='Los Angeles', state='CA', zipcode='90210', pet_friendly=True,
            created_at=base_time + datetime.timedelta(days=1),
        ),
        make_listing(
            title='Cozy Studio Near University', property_type='studio', price=180000.0,
            area_sqft=450, bedrooms=0, bathrooms=1.0, address='789 College Road',
            city='Boston', state='MA', furnished=True,
            created_at=base_time + datetime.timedelta(days=2),
        ),
        make_listing(
            title='Sold Family House', property_type='house', price=850000.0,
            area_sqft=3200, bedrooms=5, bathrooms=4.0, address='321 Maple Drive',
            city='Austin', state='TX', status='sold',
            created_at=base_time + datetime.timedelta(days=3),
        ),
    ]
    db_session.add_all(listings)
    db_session.commit()
    return listings
