from __future__ import annotations

from dataclasses import dataclass

from newsdesk.core.config import Settings


@dataclass(frozen=True)
class DatabaseConfig:
    """Resolved database connection settings."""

    endpoint: str
    anon_key: str
    service_key: str | None
    database_url: str | None
    use_mock_mode: bool
    debug_mode: bool
    seed_mock_data: bool = True

    @property
    def api_key(self) -> str:
        """Key used for Supabase REST/Storage calls: service key when present."""
        return self.service_key or self.anon_key


def resolve_database_config(app_settings: Settings) -> DatabaseConfig:
    """Decide between the real Postgres backend and the in-memory store.

    Mock mode is used when ``MOCK_DB`` is set, in the test environment without a
    database URL, in development when ``USE_MOCK_DATA`` is set and no URL is
    configured, and whenever no database URL is available at all.
    """
    has_url = bool(app_settings.database_url)
    use_mock_mode = (
        app_settings.mock_db
        or (app_settings.environment == "test" and not has_url)
        or (app_settings.environment == "development" and not has_url and app_settings.use_mock_data)
        or not has_url
    )
    return DatabaseConfig(
        endpoint=app_settings.supabase_url,
        anon_key=app_settings.supabase_anon_key,
        service_key=app_settings.supabase_service_key or None,
        database_url=app_settings.database_url,
        use_mock_mode=use_mock_mode,
        debug_mode=app_settings.debug_supabase,
        seed_mock_data=app_settings.mock_seed_data,
    )
