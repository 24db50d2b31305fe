"""Environment driven configuration for network_monitor."""

from functools import cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal['debug', 'info', 'warning', 'error']


class NetworkMonitorConfig(BaseSettings):
	"""Settings read from NETWORK_MONITOR_* environment variables."""

	model_config = SettingsConfigDict(env_prefix='', case_sensitive=True, extra='ignore')

	NETWORK_MONITOR_LOGGING_LEVEL: LogLevel = Field(default='info')
	NETWORK_MONITOR_SETUP_LOGGING: bool = Field(default=False, description='Install the stream handler on import')
	NETWORK_MONITOR_MAX_REDIRECT_HOPS: int = Field(
		default=50, ge=1, description='Upper bound on redirect hops followed when resolving the requested URL'
	)

	@field_validator('NETWORK_MONITOR_LOGGING_LEVEL', mode='before')
	@classmethod
	def lowercase_level(cls, value: Any) -> Any:
		return value.lower() if isinstance(value, str) else value


@cache
def _load_config() -> NetworkMonitorConfig:
	return NetworkMonitorConfig()


class _LazyConfig:
	"""Reads settings on first attribute access; reload() picks up environment changes."""

	def __getattr__(self, name: str) -> Any:
		return getattr(_load_config(), name)

	def reload(self) -> None:
		_load_config.cache_clear()


CONFIG = _LazyConfig()
