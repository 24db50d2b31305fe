"""Offline detection of network quiet periods from request timings."""

import logging
import math
from collections.abc import Iterable
from typing import NamedTuple

from network_monitor.url_utils import is_non_network_protocol, is_websocket_protocol
from network_monitor.views import NetworkRequest, QuietPeriod

logger = logging.getLogger(__name__)


class _TimeBoundary(NamedTuple):
	time: float
	is_start: bool


def _collect_boundaries(requests: Iterable[NetworkRequest]) -> list[_TimeBoundary]:
	boundaries: list[_TimeBoundary] = []
	for request in requests:
		# Non-network and websocket traffic never counts toward concurrency
		if is_non_network_protocol(request.protocol) or is_websocket_protocol(request.protocol):
			continue

		# Network timestamps are in seconds, quiet periods in ms
		boundaries.append(_TimeBoundary(request.network_request_time * 1000, True))
		if request.finished and request.network_end_time is not None:
			boundaries.append(_TimeBoundary(request.network_end_time * 1000, False))
	return boundaries


def find_network_quiet_periods(
	requests: Iterable[NetworkRequest],
	allowed_concurrent_requests: int,
	end_time: float = math.inf,
) -> list[QuietPeriod]:
	"""Find every period where at most `allowed_concurrent_requests` requests were inflight.

	Args:
		requests: Request records, finished or not. Unfinished ones stay inflight forever.
		allowed_concurrent_requests: Inflight count that still counts as quiet.
		end_time: Boundaries after this time (ms) are ignored and the last period is closed here.

	Returns:
		Non-overlapping, non-empty periods in ms, ordered by start.

	Boundaries with equal timestamps keep their input order: requests in the order given,
	and each request's start before its end.
	"""
	if allowed_concurrent_requests < 0:
		raise ValueError(f'allowed_concurrent_requests must be >= 0, got {allowed_concurrent_requests}')

	boundaries = sorted(
		(boundary for boundary in _collect_boundaries(requests) if boundary.time <= end_time),
		key=lambda boundary: boundary.time,
	)

	inflight = 0
	quiet_period_start = 0.0
	quiet_periods: list[QuietPeriod] = []
	for boundary in boundaries:
		if boundary.is_start:
			# A new request; leaving a quiet period?
			if inflight == allowed_concurrent_requests:
				quiet_periods.append(QuietPeriod(start=quiet_period_start, end=boundary.time))
			inflight += 1
		else:
			inflight -= 1
			# A request completed; entering a quiet period?
			if inflight == allowed_concurrent_requests:
				quiet_period_start = boundary.time

	if inflight <= allowed_concurrent_requests:
		quiet_periods.append(QuietPeriod(start=quiet_period_start, end=end_time))

	result = [period for period in quiet_periods if period.start != period.end]
	logger.debug(
		f'Found {len(result)} quiet periods for {len(boundaries)} boundaries (allowed={allowed_concurrent_requests})'
	)
	return result
