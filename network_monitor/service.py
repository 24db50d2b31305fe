"""Network monitor: tracks inflight requests and reports when the page network goes idle."""

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from bubus import BaseEvent, EventBus
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from network_monitor import quiet_periods
from network_monitor.config import CONFIG
from network_monitor.emitter import EventEmitter, Listener
from network_monitor.events import (
	LIFECYCLE_EVENTS,
	NetworkMonitorEvent,
	NetworkRequestFinishedEvent,
	NetworkRequestStartedEvent,
	NetworkStatusEvent,
)
from network_monitor.transport import (
	FRAME_NAVIGATED,
	GET_RESOURCE_TREE,
	PROTOCOL_EVENT,
	ProtocolSession,
	RawProtocolMessage,
	RequestLedger,
	TargetManager,
)
from network_monitor.views import FrameNavigation, NavigationUrls, NetworkRequest, QuietPeriod

if TYPE_CHECKING:
	from cdp_use.cdp.page.commands import GetResourceTreeReturns
	from cdp_use.cdp.page.events import FrameNavigatedEvent


@dataclass
class _Recording:
	"""State that only exists while the monitor is enabled."""

	ledger: RequestLedger
	frame_navigations: list[FrameNavigation] = field(default_factory=list)
	ledger_listeners: list[tuple[str, Callable[[NetworkRequest], None]]] = field(default_factory=list)


class NetworkMonitor(BaseModel):
	"""Wires a request ledger to the page's protocol traffic and reports network status.

	While enabled, every request start/finish reported by the ledger is re-emitted under the
	same name and followed by one event of each idle/busy pair:

	- `networkidle` / `networkbusy`: no network requests inflight
	- `network-2-idle` / `network-2-busy`: at most two network requests inflight
	- `network-critical-idle` / `network-critical-busy`: no High/VeryHigh priority request
	  of the root document frame inflight
	"""

	model_config = ConfigDict(arbitrary_types_allowed=True, extra='forbid')

	EMITS: ClassVar[list[type[BaseEvent]]] = [NetworkRequestStartedEvent, NetworkRequestFinishedEvent, NetworkStatusEvent]

	NEAR_IDLE_ALLOWED_REQUESTS: ClassVar[int] = 2
	ROOT_DOCUMENT_RESOURCE_TYPE: ClassVar[str] = 'Document'

	target_manager: TargetManager
	recorder_factory: Callable[[], RequestLedger] = Field(description='Creates a fresh request ledger on every enable()')
	event_bus: EventBus | None = Field(default=None, description='Optional bus that also receives network events')
	logger: logging.Logger = Field(default_factory=lambda: logging.getLogger('network_monitor.NetworkMonitor'))

	_session: ProtocolSession = PrivateAttr()
	_emitter: EventEmitter = PrivateAttr(default_factory=EventEmitter)
	_recording: _Recording | None = PrivateAttr(default=None)
	_frame_navigated_handler: Callable[['FrameNavigatedEvent'], None] = PrivateAttr()
	_protocol_message_handler: Callable[[RawProtocolMessage], None] = PrivateAttr()

	def model_post_init(self, __context: Any) -> None:
		self._session = self.target_manager.root_session()
		# Bound once so off() receives the same object on() did
		self._frame_navigated_handler = self._on_frame_navigated
		self._protocol_message_handler = self._on_protocol_message

	# ------------------------------------------------------------------
	# Subscriptions
	# ------------------------------------------------------------------

	def on(self, event_name: NetworkMonitorEvent | str, listener: Listener) -> Callable[[], None]:
		"""Subscribe to a monitor event. Returns a callable that unsubscribes."""
		return self._emitter.on(event_name, listener)

	def once(self, event_name: NetworkMonitorEvent | str, listener: Listener) -> Callable[[], None]:
		return self._emitter.once(event_name, listener)

	def off(self, event_name: NetworkMonitorEvent | str, listener: Listener) -> None:
		self._emitter.off(event_name, listener)

	def listener_count(self, event_name: NetworkMonitorEvent | str) -> int:
		return self._emitter.listener_count(event_name)

	# ------------------------------------------------------------------
	# Lifecycle
	# ------------------------------------------------------------------

	@property
	def is_enabled(self) -> bool:
		return self._recording is not None

	async def enable(self) -> None:
		"""Start recording with a fresh ledger. No-op when already enabled."""
		if self._recording is not None:
			return

		recording = _Recording(ledger=self.recorder_factory())
		for event_name in LIFECYCLE_EVENTS:
			listener = self._make_relay(event_name, recording)
			recording.ledger.on(event_name.value, listener)
			recording.ledger_listeners.append((event_name.value, listener))
		self._recording = recording

		self._session.on(FRAME_NAVIGATED, self._frame_navigated_handler)
		self.target_manager.on(PROTOCOL_EVENT, self._protocol_message_handler)
		self.logger.debug('[NetworkMonitor] Enabled, recording network requests')

	async def disable(self) -> None:
		"""Stop recording and drop the ledger and navigation history. No-op when disabled."""
		recording = self._recording
		if recording is None:
			return

		self._session.off(FRAME_NAVIGATED, self._frame_navigated_handler)
		self.target_manager.off(PROTOCOL_EVENT, self._protocol_message_handler)
		for event_name, listener in recording.ledger_listeners:
			recording.ledger.off(event_name, listener)

		recording.frame_navigations.clear()
		self._recording = None
		self.logger.debug('[NetworkMonitor] Disabled')

	def _make_relay(self, event_name: NetworkMonitorEvent, recording: _Recording) -> Callable[[NetworkRequest], None]:
		"""Re-emit a ledger event under the same name, then report the network status."""

		def relay(request: NetworkRequest) -> None:
			# Events from a ledger replaced by disable()/enable() are stale
			if self._recording is not recording:
				return
			self._emitter.emit(event_name, request)
			if self.event_bus is not None:
				bus_event_cls = (
					NetworkRequestStartedEvent
					if event_name == NetworkMonitorEvent.REQUEST_STARTED
					else NetworkRequestFinishedEvent
				)
				self.event_bus.dispatch(bus_event_cls(request=request))
			self._emit_network_status()

		return relay

	def _on_frame_navigated(self, event: 'FrameNavigatedEvent') -> None:
		if self._recording is None:
			return
		self._recording.frame_navigations.append(FrameNavigation.from_event(dict(event)))

	def _on_protocol_message(self, message: RawProtocolMessage) -> None:
		if self._recording is None:
			return
		self._recording.ledger.dispatch(message)

	# ------------------------------------------------------------------
	# Queries
	# ------------------------------------------------------------------

	def _records(self) -> Sequence[NetworkRequest]:
		if self._recording is None:
			return ()
		return self._recording.ledger.get_raw_records()

	def get_frame_navigations(self) -> list[FrameNavigation]:
		"""Frame navigations observed since the last enable(), in arrival order."""
		if self._recording is None:
			return []
		return list(self._recording.frame_navigations)

	async def get_navigation_urls(self) -> NavigationUrls:
		"""Resolve the originally requested URL and the final URL of the main frame.

		Returns an empty result when no navigation was observed. Errors from the
		Page.getResourceTree command propagate to the caller.
		"""
		frame_navigations = self.get_frame_navigations()
		if not frame_navigations:
			return NavigationUrls()

		resource_tree: 'GetResourceTreeReturns' = await self._session.send_command(GET_RESOURCE_TREE)
		main_frame_id = resource_tree['frameTree']['frame']['id']
		main_frame_navigations = [frame for frame in frame_navigations if frame.id == main_frame_id]
		if not main_frame_navigations:
			self.logger.warning('[NetworkMonitor] No detected navigations')

		# The requested URL is the initiator request for the first frame navigation
		requested_url = main_frame_navigations[0].url if main_frame_navigations else None
		if requested_url is not None and self._recording is not None:
			requested_url = self._resolve_redirect_origin(requested_url, self._records())

		return NavigationUrls(
			requested_url=requested_url,
			main_document_url=main_frame_navigations[-1].url if main_frame_navigations else None,
		)

	def _resolve_redirect_origin(self, url: str, records: Sequence[NetworkRequest]) -> str:
		"""Walk redirect sources back from the request for `url` to the first request of the chain."""
		by_id = {record.request_id: record for record in records}
		request = next((record for record in records if record.url == url), None)
		max_hops = CONFIG.NETWORK_MONITOR_MAX_REDIRECT_HOPS

		visited: set[str] = set()
		while request is not None and request.redirect_source_id is not None:
			visited.add(request.request_id)
			source = by_id.get(request.redirect_source_id)
			if source is None or source.request_id in visited:
				break
			if len(visited) > max_hops:
				self.logger.debug(f'[NetworkMonitor] Redirect chain for {url} exceeds {max_hops} hops, stopping')
				break
			request = source
			url = source.url
		return url

	def get_inflight_requests(self) -> list[NetworkRequest]:
		"""All unfinished requests, network or not. Empty when disabled."""
		return [request for request in self._records() if not request.finished]

	def is_idle(self) -> bool:
		"""Whether there are 0 inflight network requests."""
		return self._is_active_idle_period(0)

	def is_2_idle(self) -> bool:
		"""Whether there are 2 or fewer inflight network requests."""
		return self._is_active_idle_period(self.NEAR_IDLE_ALLOWED_REQUESTS)

	def is_critical_idle(self) -> bool:
		"""Whether no important resource of the root frame is in progress.

		Only High/VeryHigh priority requests of the root document's frame count, so tracking
		pixels, low priority images and cross frame requests are ignored. Reports False until
		a Document request has been seen, since the root frame is unknown before that.
		"""
		if self._recording is None:
			return False
		root_frame_request = next(
			(request for request in self._records() if request.resource_type == self.ROOT_DOCUMENT_RESOURCE_TYPE),
			None,
		)
		if root_frame_request is None or root_frame_request.frame_id is None:
			return False
		root_frame_id = root_frame_request.frame_id

		return self._is_active_idle_period(
			0,
			lambda request: request.frame_id == root_frame_id and request.priority.is_critical,
		)

	def _is_active_idle_period(
		self,
		allowed_requests: int,
		request_filter: Callable[[NetworkRequest], bool] | None = None,
	) -> bool:
		"""Whether the number of inflight network requests is at most `allowed_requests`."""
		if self._recording is None:
			return False

		inflight_requests = 0
		for request in self._records():
			if request.finished:
				continue
			if request_filter is not None and not request_filter(request):
				continue
			if request.is_non_network_request:
				continue
			inflight_requests += 1

		return inflight_requests <= allowed_requests

	def _emit_network_status(self) -> None:
		zero_quiet = self.is_idle()
		two_quiet = self.is_2_idle()
		critical_quiet = self.is_critical_idle()

		self._emitter.emit(NetworkMonitorEvent.IDLE if zero_quiet else NetworkMonitorEvent.BUSY)
		self._emitter.emit(NetworkMonitorEvent.TWO_IDLE if two_quiet else NetworkMonitorEvent.TWO_BUSY)
		self._emitter.emit(NetworkMonitorEvent.CRITICAL_IDLE if critical_quiet else NetworkMonitorEvent.CRITICAL_BUSY)

		if self.event_bus is not None:
			self.event_bus.dispatch(
				NetworkStatusEvent(
					is_idle=zero_quiet,
					is_2_idle=two_quiet,
					is_critical_idle=critical_quiet,
					inflight_requests=len(self.get_inflight_requests()),
				)
			)

		if two_quiet and zero_quiet:
			self.logger.debug('[NetworkMonitor] network fully-quiet')
		elif two_quiet and not zero_quiet:
			self.logger.debug('[NetworkMonitor] network semi-quiet')
		else:
			self.logger.debug('[NetworkMonitor] network busy')

	# ------------------------------------------------------------------
	# Offline analysis
	# ------------------------------------------------------------------

	@staticmethod
	def find_network_quiet_periods(
		requests: Iterable[NetworkRequest],
		allowed_concurrent_requests: int,
		end_time: float = math.inf,
	) -> list[QuietPeriod]:
		"""Periods (ms) where at most `allowed_concurrent_requests` network requests were inflight."""
		return quiet_periods.find_network_quiet_periods(requests, allowed_concurrent_requests, end_time)
