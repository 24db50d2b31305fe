"""Event names emitted by NetworkMonitor and their bubus counterparts."""

from enum import Enum

from bubus import BaseEvent
from pydantic import Field

from network_monitor.views import NetworkRequest


class NetworkMonitorEvent(str, Enum):
	"""Names accepted by NetworkMonitor.on() / off()."""

	# Relayed from the request ledger
	REQUEST_STARTED = 'requeststarted'
	REQUEST_FINISHED = 'requestfinished'

	# Status, one of each pair per recomputation
	IDLE = 'networkidle'
	BUSY = 'networkbusy'
	TWO_IDLE = 'network-2-idle'
	TWO_BUSY = 'network-2-busy'
	CRITICAL_IDLE = 'network-critical-idle'
	CRITICAL_BUSY = 'network-critical-busy'


LIFECYCLE_EVENTS: tuple[NetworkMonitorEvent, ...] = (
	NetworkMonitorEvent.REQUEST_STARTED,
	NetworkMonitorEvent.REQUEST_FINISHED,
)


# ============================================================================
# bubus events, dispatched when the monitor is given an EventBus
# ============================================================================


class NetworkRequestStartedEvent(BaseEvent):
	"""A request was observed starting."""

	request: NetworkRequest

	event_timeout: float | None = 5.0


class NetworkRequestFinishedEvent(BaseEvent):
	"""A request was observed finishing."""

	request: NetworkRequest

	event_timeout: float | None = 5.0


class NetworkStatusEvent(BaseEvent):
	"""Idle predicates recomputed after a request started or finished."""

	is_idle: bool = Field(description='No network requests inflight')
	is_2_idle: bool = Field(description='At most two network requests inflight')
	is_critical_idle: bool = Field(description='No high priority root frame requests inflight')
	inflight_requests: int = Field(default=0, description='Unfinished requests, network or not')

	event_timeout: float | None = 5.0
