"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from fastmvc.binding.binding_result import BindingResult
from fastmvc.config import Settings
from fastmvc.core.app_factory import create_app


@pytest.fixture
def test_settings():
    """Settings pointing at the bundled demo web root."""
    return Settings(
        api_host="127.0.0.1",
        api_port=8000,
        web_root=Path(__file__).resolve().parent.parent / "fastmvc" / "webapp",
        view_folder="/WEB-INF/views/",
        log_level="DEBUG",
    )


@pytest.fixture
def app(test_settings):
    """Fresh FastAPI application per test."""
    return create_app(test_settings)


@pytest.fixture
def test_client(app):
    """FastAPI test client with lifespan context."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def web_root(tmp_path):
    """Temporary web root with a couple of templates."""
    views = tmp_path / "WEB-INF" / "views"
    views.mkdir(parents=True)
    (views / "greet.html").write_text("<p>Hello {{ name }}</p>", encoding="utf-8")
    (views / "state.html").write_text("<p>{{ request.state.name }}</p>", encoding="utf-8")
    (views / "broken.html").write_text("{{ missing.attribute.call() }}", encoding="utf-8")
    (tmp_path / "top.html").write_text("<p>top {{ name }}</p>", encoding="utf-8")
    return tmp_path


@pytest.fixture
def binding_result():
    """Fresh BindingResult, as created for each request."""
    return BindingResult()
