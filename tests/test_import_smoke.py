import sys

import pytest
from unittest.mock import patch


@pytest.mark.parametrize("validate_urls", ["true", "false"])
def test_import_graph_smoke(validate_urls):
    """The app imports cleanly whatever the feature flags are."""
    with patch.dict(sys.modules), patch.dict("os.environ", {
        "VALIDATE_IMAGE_URLS": validate_urls,
        "REDIS_URL": "redis://localhost:6379/0",
    }):
        # Settings are read at import, so they must be re-imported too
        for mod in ("leadflow.settings", "leadflow.main", "leadflow.core.flow", "leadflow.api.form_routes"):
            sys.modules.pop(mod, None)
        try:
            import leadflow.main
            import leadflow.core.flow
            import leadflow.api.form_routes
            from leadflow.settings import settings
        except ImportError as e:
            pytest.fail(f"Import failed with VALIDATE_IMAGE_URLS={validate_urls}: {e}")

        assert settings.VALIDATE_IMAGE_URLS is (validate_urls == "true")
        assert leadflow.main.settings is settings


def test_uvicorn_importable():
    from leadflow.main import app
    assert app is not None


def test_capacity_bounds_are_checked():
    from leadflow.settings import Settings

    s = Settings()
    s.MINIMUM_PRODUCTS, s.MAXIMUM_PRODUCTS = 5, 3
    with pytest.raises(ValueError):
        s.validate_capacity()
    s.MINIMUM_PRODUCTS = 0
    with pytest.raises(ValueError):
        s.validate_capacity()
    s.MINIMUM_PRODUCTS, s.MAXIMUM_PRODUCTS = 3, 10
    s.validate_capacity()
