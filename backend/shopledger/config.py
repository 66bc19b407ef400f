# backend/shopledger/config.py
from __future__ import annotations
import os


DEFAULT_SEED_PRODUCTS = [
    {"id": "cylinder-standard", "name": "Standard Cylinder", "unit_price_cents": None, "starting_stock": 200},
    {"id": "cylinder-heavy", "name": "Heavy Cylinder", "unit_price_cents": None, "starting_stock": 100},
]


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Relative SQLite paths resolve against the working directory
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///shopledger.sqlite3",  # default local file
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "$")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Products created by `flask system init` on an empty database
    SEED_PRODUCTS = DEFAULT_SEED_PRODUCTS

    # Browser front ends allowed to call the API
    CORS_ORIGINS = [
        o.strip()
        for o in os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
        if o.strip()
    ]
