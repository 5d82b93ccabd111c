"""
Application startup and fail-fast tests.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


def test_app_fails_to_start_when_db_unreachable() -> None:
    """App fails fast when database is unreachable at startup."""
    with patch("inkwell.main.check_db_connection") as mock_check:
        mock_check.side_effect = Exception("Database unreachable")

        from inkwell.main import create_app

        app = create_app()

        with pytest.raises(Exception, match="Database unreachable"):
            with TestClient(app) as test_client:
                test_client.get("/health")


def test_app_fails_to_start_without_secret_key() -> None:
    from inkwell.config import get_settings
    from inkwell.main import create_app

    app = create_app()
    with patch.object(get_settings(), "secret_key", ""):
        with pytest.raises(ValueError, match="SECRET_KEY"):
            with TestClient(app):
                pass


def test_lifespan_starts_and_stops_worker_pool() -> None:
    """The worker pool is available while the app runs and released on shutdown."""
    from inkwell.main import create_app

    app = create_app()
    with TestClient(app) as test_client:
        pool = app.state.worker_pool
        assert pool.running is True
        assert test_client.get("/health").status_code == 200

    assert app.state.worker_pool is None
    assert pool.running is False
