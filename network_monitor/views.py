"""Pydantic models for network request records and monitor results."""

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from network_monitor.url_utils import get_url_scheme, is_non_network_protocol


class ResourcePriority(str, Enum):
	"""Loading priority assigned by the browser (CDP Network.ResourcePriority)."""

	VERY_LOW = 'VeryLow'
	LOW = 'Low'
	MEDIUM = 'Medium'
	HIGH = 'High'
	VERY_HIGH = 'VeryHigh'

	@property
	def is_critical(self) -> bool:
		return self in (ResourcePriority.HIGH, ResourcePriority.VERY_HIGH)


class NetworkRequest(BaseModel):
	"""A single request as tracked by a request ledger.

	Times are in seconds. `network_end_time` is only meaningful once the request has finished.
	"""

	model_config = ConfigDict(extra='forbid')

	request_id: str = Field(..., description='Ledger-unique id of the request')
	url: str = Field(..., description='Request URL')
	protocol: str = Field(default='', description='Protocol or scheme the request was served over')
	frame_id: str | None = Field(default=None, description='Frame that issued the request')
	resource_type: str | None = Field(default=None, description='CDP resource type, e.g. Document')
	priority: ResourcePriority = Field(default=ResourcePriority.LOW)
	finished: bool = False
	network_request_time: float = Field(..., description='Start of the request in seconds')
	network_end_time: float | None = Field(default=None, description='End of the request in seconds')
	redirect_source_id: str | None = Field(default=None, description='request_id of the request that redirected here')

	@model_validator(mode='after')
	def check_timing(self) -> 'NetworkRequest':
		if self.finished:
			if self.network_end_time is None:
				raise ValueError(f'finished request {self.request_id} has no network_end_time')
			if self.network_end_time < self.network_request_time:
				raise ValueError(f'request {self.request_id} ends before it starts')
		return self

	@property
	def is_non_network_request(self) -> bool:
		"""True for data:, blob: and similar requests that never touch the network."""
		return is_non_network_protocol(self.protocol) or is_non_network_protocol(get_url_scheme(self.url))


class FrameNavigation(BaseModel):
	"""A frame navigation observed on the root session."""

	id: str
	url: str

	@classmethod
	def from_event(cls, event: dict[str, Any]) -> 'FrameNavigation':
		"""Build from a Page.frameNavigated payload ({'frame': {'id', 'url', ...}})."""
		frame = event['frame']
		return cls(id=frame['id'], url=frame['url'])


class NavigationUrls(BaseModel):
	"""URLs involved in the main frame navigation."""

	model_config = ConfigDict(extra='forbid')

	requested_url: str | None = Field(default=None, description='URL originally requested, before redirects')
	main_document_url: str | None = Field(default=None, description='Final URL of the main frame')


class QuietPeriod(BaseModel):
	"""Interval in milliseconds where inflight requests stayed within the allowed count."""

	start: float
	end: float = math.inf

	@property
	def duration(self) -> float:
		return self.end - self.start
