"""
Tests for lazy database engine setup.
"""
import pytest

from shipzone.core import database


class TestDatabase:

    def test_engine_requires_database_url(self, monkeypatch):
        """Test engine creation fails without DATABASE_URL."""
        monkeypatch.setattr(database.settings, "DATABASE_URL", "")
        monkeypatch.setattr(database, "_engine", None)

        with pytest.raises(RuntimeError):
            database.get_engine()

    @pytest.mark.asyncio
    async def test_dispose_without_engine_is_noop(self, monkeypatch):
        """Test disposing before first use is harmless."""
        monkeypatch.setattr(database, "_engine", None)

        await database.dispose_engine()

        assert database._engine is None
        assert database._session_factory is None

    def test_tables_registered(self):
        """Test shipping tables are registered on Base."""
        import shipzone.models  # noqa: F401

        assert {"shipping_zones", "shipping_methods", "shipping_rates"} <= set(database.Base.metadata.tables)
