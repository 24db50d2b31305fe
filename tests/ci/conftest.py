"""In-memory stand-ins for the request ledger and the CDP session transport."""

from typing import Any

import pytest

from network_monitor.emitter import EventEmitter
from network_monitor.service import NetworkMonitor
from network_monitor.views import NetworkRequest


class FakeRequestLedger:
	"""Ledger driven either directly or through test.* protocol messages."""

	def __init__(self) -> None:
		self._emitter = EventEmitter()
		self._records: list[NetworkRequest] = []
		self.dispatched: list[dict[str, Any]] = []

	def dispatch(self, message: dict[str, Any]) -> None:
		self.dispatched.append(message)
		method = message.get('method')
		params = message.get('params', {})
		if method == 'test.requestStarted':
			self.start(NetworkRequest(**params))
		elif method == 'test.requestFinished':
			self.finish(params['request_id'], params['end_time'])

	def on(self, event_name: str, listener) -> None:
		self._emitter.on(event_name, listener)

	def off(self, event_name: str, listener) -> None:
		self._emitter.off(event_name, listener)

	def listener_count(self, event_name: str) -> int:
		return self._emitter.listener_count(event_name)

	def get_raw_records(self) -> list[NetworkRequest]:
		return list(self._records)

	def add(self, request: NetworkRequest) -> None:
		"""Record without emitting anything."""
		self._records.append(request)

	def start(self, request: NetworkRequest) -> NetworkRequest:
		self._records.append(request)
		self._emitter.emit('requeststarted', request)
		return request

	def finish(self, request_id: str, end_time: float) -> NetworkRequest:
		for i, record in enumerate(self._records):
			if record.request_id == request_id:
				finished = record.model_copy(update={'finished': True, 'network_end_time': end_time})
				self._records[i] = finished
				self._emitter.emit('requestfinished', finished)
				return finished
		raise KeyError(request_id)


class FakeProtocolSession:
	def __init__(self, main_frame_id: str = 'main-frame') -> None:
		self._emitter = EventEmitter()
		self.main_frame_id = main_frame_id
		self.commands: list[str] = []

	def on(self, event_name: str, listener) -> None:
		self._emitter.on(event_name, listener)

	def off(self, event_name: str, listener) -> None:
		self._emitter.off(event_name, listener)

	def listener_count(self, event_name: str) -> int:
		return self._emitter.listener_count(event_name)

	async def send_command(self, method: str, params: dict[str, Any] | None = None) -> Any:
		self.commands.append(method)
		if method == 'Page.getResourceTree':
			return {'frameTree': {'frame': {'id': self.main_frame_id, 'loaderId': 'loader', 'url': ''}, 'resources': []}}
		raise ValueError(f'Unexpected command {method}')

	def navigate(self, frame_id: str, url: str) -> None:
		self._emitter.emit('Page.frameNavigated', {'frame': {'id': frame_id, 'url': url, 'loaderId': 'loader'}})


class FakeTargetManager:
	def __init__(self, session: FakeProtocolSession | None = None) -> None:
		self._emitter = EventEmitter()
		self.session = session or FakeProtocolSession()

	def root_session(self) -> FakeProtocolSession:
		return self.session

	def on(self, event_name: str, listener) -> None:
		self._emitter.on(event_name, listener)

	def off(self, event_name: str, listener) -> None:
		self._emitter.off(event_name, listener)

	def listener_count(self, event_name: str) -> int:
		return self._emitter.listener_count(event_name)

	def send_protocol_message(self, message: dict[str, Any]) -> None:
		self._emitter.emit('protocolevent', message)


def make_request(request_id: str, **overrides: Any) -> NetworkRequest:
	"""Build an unfinished http request record, overriding any field."""
	fields: dict[str, Any] = {
		'request_id': request_id,
		'url': f'https://example.com/{request_id}',
		'protocol': 'http/1.1',
		'frame_id': 'main-frame',
		'resource_type': 'Script',
		'priority': 'Low',
		'network_request_time': 0.0,
	}
	fields.update(overrides)
	return NetworkRequest(**fields)


@pytest.fixture
def target_manager() -> FakeTargetManager:
	return FakeTargetManager()


@pytest.fixture
def ledgers() -> list[FakeRequestLedger]:
	"""Every ledger the monitor has created, newest last."""
	return []


@pytest.fixture
def ledger_factory(ledgers: list[FakeRequestLedger]):
	def factory() -> FakeRequestLedger:
		ledger = FakeRequestLedger()
		ledgers.append(ledger)
		return ledger

	return factory


@pytest.fixture
def monitor(target_manager: FakeTargetManager, ledger_factory) -> NetworkMonitor:
	return NetworkMonitor(target_manager=target_manager, recorder_factory=ledger_factory)


@pytest.fixture(name='make_request')
def make_request_fixture():
	return make_request


@pytest.fixture
def reset_config(monkeypatch):
	"""Reload CONFIG after the test so monkeypatched env vars don't leak."""
	from network_monitor.config import CONFIG

	CONFIG.reload()
	yield monkeypatch
	monkeypatch.undo()
	CONFIG.reload()
