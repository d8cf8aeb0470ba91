# conftest.py
# Pytest configuration for the academic records API test environment
#
# Sets hermetic environment flags before any application module is
# imported, so records_api.main builds an in-memory Firestore mock with
# rate limiting off and no .env-provided secrets.
#
# @see: records_api/config.py - load_settings reads these variables
# @note: setdefault keeps explicit overrides from the shell

import os

os.environ.setdefault("USE_REAL_FIREBASE", "false")
os.environ.setdefault("MOCK_DB_FILE", "")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("INSTALL_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
