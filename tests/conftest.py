"""Test configuration and fixtures."""

import os

# Settings are read at import time; point them at throwaway values first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["INVOICE_AUTO_SEND"] = "false"
os.environ["INVOICE_LOGO_PATH"] = "./does-not-exist/logo.png"
os.environ["SENDGRID_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from telus_umrah.db.session import Base, get_db
from telus_umrah.models.custom_umrah_request import CustomUmrahRequest  # noqa: F401
from telus_umrah.models.hotel import Hotel
from telus_umrah.models.hotel_booking import HotelBooking  # noqa: F401
from telus_umrah.models.package_booking import PackageBooking  # noqa: F401
from telus_umrah.models.umrah_package import UmrahPackage


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def client(db):
    from telus_umrah.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def hotel(db):
    h = Hotel(
        id="hotel-1",
        name="Makkah Clock Royal Tower",
        city="Makkah",
        standard_room_price=20000,
        deluxe_room_price=30000,
        family_suite_price=45000,
        meals_price=5000,
        transport_price=8000,
    )
    db.add(h)
    db.commit()
    return h


@pytest.fixture
def umrah_package(db):
    p = UmrahPackage(id="package-1", name="15 Days Economy Umrah", price=250000, duration_days=15)
    db.add(p)
    db.commit()
    return p


@pytest.fixture
def hotel_payload():
    return {
        "hotelId": "hotel-1",
        "customerName": "Ali Khan",
        "customerEmail": "Ali.Khan@Example.com",
        "customerPhone": "+92 300 1234567",
        "customerNationality": "Pakistani",
        "checkInDate": "2025-03-01",
        "checkOutDate": "2025-03-05",
        "rooms": 2,
        "adults": 3,
        "children": 1,
        "childAges": [7],
        "bedType": "Double",
        "roomType": "deluxe",
        "meals": True,
        "transport": "true",
        "paymentMethod": "cash",
    }


@pytest.fixture
def package_payload():
    return {
        "packageId": "package-1",
        "customerEmail": "raza.family@example.com",
        "adults": [
            {"name": "Sara Raza", "gender": "female"},
            {"name": "Ahmed Raza", "gender": "male", "phone": "+92 321 7654321", "nationality": "Pakistani", "isHead": True},
        ],
        "children": [{"name": "Omar Raza", "gender": "male", "age": 6}],
        "infants": [],
        "rooms": 1,
        "umrahVisa": True,
        "esim": True,
    }


@pytest.fixture
def custom_payload():
    return {
        "name": "Bilal Ahmed",
        "email": "bilal@example.com",
        "phone": "0300 1112223",
        "nationality": "Pakistani",
        "from": "LHE",
        "to": "JED",
        "departDate": "2025-04-01",
        "returnDate": "2025-04-15",
        "airline": "Saudia",
        "airlineClass": "Economy",
        "adults": 2,
        "children": 1,
        "childAges": [4],
        "rooms": 1,
        "transport": True,
        "hotels": [
            {"city": "Makkah", "hotel": "Hilton Suites", "hotelClass": "5 Star", "stayDuration": "7 nights", "bedType": "double"},
            {"city": "Madina", "hotel": "", "hotelClass": "4 Star", "stayDuration": "5 nights", "bedType": "double"},
        ],
        "notes": "Wheelchair needed at the airport.\nPrefer a Haram view room if available.",
    }
