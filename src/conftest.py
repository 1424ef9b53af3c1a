"""Test-wide environment, set before any application module is imported."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
# bcrypt's minimum cost keeps hashing-heavy tests fast
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")
os.environ.pop("MONGO_URL", None)
