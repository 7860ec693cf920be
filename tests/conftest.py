import pytest
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from prengine.app import app, limiter, preferences_cache

@pytest.fixture()
def client():
    app.config.update(TESTING=True)
    limiter.enabled = False
    preferences_cache.invalidate()
    with app.test_client() as client:
        yield client
