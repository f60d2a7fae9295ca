import os
from pathlib import Path

import django
from django.test.utils import setup_test_environment, teardown_test_environment


def pytest_configure():
    os.environ.setdefault("SECRET_KEY", "test-secret")
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "test_settings")
    os.environ.setdefault("GOOGLE_CLOUD_VISION_API_KEY", "")


def pytest_sessionstart(session):
    # No databases to create: split sessions live in the cache
    django.setup()
    setup_test_environment()


def pytest_sessionfinish(session, exitstatus):
    teardown_test_environment()


def pytest_collection_modifyitems(config, items):
    for item in items:
        path = Path(str(item.fspath))
        if "receipts" in path.parts:
            item.add_marker("backend")
        else:
            item.add_marker("lib")
