"""Synchronous publish/subscribe registry used by the network monitor."""

from collections.abc import Callable
from enum import Enum
from typing import Any

Listener = Callable[..., Any]


def _key(event_name: str) -> str:
	# Enum members hash by member name, so always key by the plain value
	return event_name.value if isinstance(event_name, Enum) else event_name


class EventEmitter:
	"""Maps event names to ordered listener lists.

	Delivery is synchronous and in registration order. Listeners registered or removed
	while an event is being emitted only take effect for the next emit.
	"""

	def __init__(self) -> None:
		self._listeners: dict[str, list[Listener]] = {}

	def on(self, event_name: str, listener: Listener) -> Callable[[], None]:
		"""Register `listener` for `event_name`; returns a callable that unsubscribes it."""
		self._listeners.setdefault(_key(event_name), []).append(listener)

		def _remove() -> None:
			self.off(event_name, listener)

		return _remove

	def once(self, event_name: str, listener: Listener) -> Callable[[], None]:
		"""Register a listener that is removed before its first invocation."""

		def _wrapper(*args: Any) -> Any:
			self.off(event_name, _wrapper)
			return listener(*args)

		# Lets off() find the wrapper by the caller's callable
		_wrapper.listener = listener  # type: ignore[attr-defined]
		return self.on(event_name, _wrapper)

	def off(self, event_name: str, listener: Listener) -> None:
		"""Remove the first registration of `listener` (or of a once() wrapper around it); no-op if absent."""
		key = _key(event_name)
		listeners = self._listeners.get(key)
		if not listeners:
			return
		for i, registered in enumerate(listeners):
			if registered is listener or getattr(registered, 'listener', None) is listener:
				del listeners[i]
				break
		if not listeners:
			del self._listeners[key]

	def emit(self, event_name: str, *args: Any) -> bool:
		"""Call every listener of `event_name` with `args`. Returns whether any listener ran."""
		listeners = self._listeners.get(_key(event_name))
		if not listeners:
			return False
		for listener in list(listeners):
			listener(*args)
		return True

	def listener_count(self, event_name: str) -> int:
		return len(self._listeners.get(_key(event_name), ()))

	def remove_all_listeners(self, event_name: str | None = None) -> None:
		if event_name is None:
			self._listeners.clear()
		else:
			self._listeners.pop(_key(event_name), None)
