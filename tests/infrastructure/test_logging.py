"""Tests for the structlog configuration."""

import logging

import pytest
import structlog

from storefront.config.logging import configure_logging, enum_values, order_context
from storefront.config.settings import Settings
from storefront.domain.model.inventory import MovementType
from storefront.domain.model.order import OrderStatus


@pytest.fixture
def restore_structlog():
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestEnumValues:

    def test_enums_rendered_by_value(self):
        event = enum_values(
            None, "info", {"event": "x", "status": OrderStatus.SHIPPED, "type": MovementType.RELEASE, "qty": 2}
        )
        assert event == {"event": "x", "status": "shipped", "type": "release", "qty": 2}


class TestOrderContext:

    def test_binds_only_known_values_for_the_block(self, restore_structlog):
        with order_context(order_id=7, order_number=None):
            assert structlog.contextvars.get_contextvars() == {"order_id": 7}
        assert structlog.contextvars.get_contextvars() == {}

    def test_unbinds_on_error(self, restore_structlog):
        with pytest.raises(RuntimeError):
            with order_context(order_id=3):
                raise RuntimeError("boom")
        assert "order_id" not in structlog.contextvars.get_contextvars()


class TestConfigureLogging:

    def test_production_renders_json(self, restore_structlog):
        configure_logging(Settings(environment="production", log_level="WARNING"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.contextvars.merge_contextvars in processors
        assert enum_values in processors

    def test_development_renders_console(self, restore_structlog):
        configure_logging(Settings(environment="development"))
        assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)

    def test_filelock_chatter_silenced(self, restore_structlog):
        configure_logging(Settings())
        assert logging.getLogger("filelock").level == logging.WARNING
