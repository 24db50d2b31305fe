"""Contracts for the collaborators NetworkMonitor is wired to.

The monitor never parses protocol traffic itself. A request ledger turns raw CDP messages
into NetworkRequest records, and the session transport delivers those messages together
with page navigation notifications.
"""

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from network_monitor.views import NetworkRequest

if TYPE_CHECKING:
	from cdp_use.cdp.page.events import FrameNavigatedEvent

# Raw CDP message as forwarded by the target manager ({'method': ..., 'params': ...})
RawProtocolMessage = dict[str, Any]

FRAME_NAVIGATED = 'Page.frameNavigated'
GET_RESOURCE_TREE = 'Page.getResourceTree'
PROTOCOL_EVENT = 'protocolevent'


@runtime_checkable
class RequestLedger(Protocol):
	"""Owns the request records of one monitoring run."""

	def dispatch(self, message: RawProtocolMessage) -> None: ...

	def on(self, event_name: str, listener: Callable[[NetworkRequest], Any]) -> Any: ...

	def off(self, event_name: str, listener: Callable[[NetworkRequest], Any]) -> None: ...

	def get_raw_records(self) -> Sequence[NetworkRequest]:
		"""Live snapshot in discovery order."""
		...


@runtime_checkable
class ProtocolSession(Protocol):
	"""Root CDP session of the page under measurement."""

	def on(self, event_name: str, listener: Callable[['FrameNavigatedEvent'], Any]) -> Any: ...

	def off(self, event_name: str, listener: Callable[['FrameNavigatedEvent'], Any]) -> None: ...

	async def send_command(self, method: str, params: dict[str, Any] | None = None) -> Any: ...


@runtime_checkable
class TargetManager(Protocol):
	"""Fans in raw protocol messages from every attached target."""

	def root_session(self) -> ProtocolSession: ...

	def on(self, event_name: str, listener: Callable[[RawProtocolMessage], Any]) -> Any: ...

	def off(self, event_name: str, listener: Callable[[RawProtocolMessage], Any]) -> None: ...


RequestLedgerFactory = Callable[[], RequestLedger]
