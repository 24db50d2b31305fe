"""
Example: find the quiet windows of a recorded page load.

Run with: uv run python examples/find_quiet_periods.py
"""

from network_monitor import NetworkMonitor, NetworkRequest, setup_logging

setup_logging(level='debug')

# (url, protocol, resource type, start s, end s or None while inflight)
TIMINGS = [
	('https://example.com/', 'h2', 'Document', 0.0, 0.4),
	('https://example.com/app.js', 'h2', 'Script', 0.45, 0.9),
	('https://example.com/logo.png', 'h2', 'Image', 0.5, 1.2),
	('data:image/png;base64,AAAA', 'data', 'Image', 0.6, 0.6),
	('wss://example.com/live', 'wss', 'WebSocket', 1.0, None),
	('https://example.com/api/feed', 'h2', 'XHR', 2.0, 2.6),
]


def build_requests() -> list[NetworkRequest]:
	return [
		NetworkRequest(
			request_id=str(i),
			url=url,
			protocol=protocol,
			resource_type=resource_type,
			finished=end is not None,
			network_request_time=start,
			network_end_time=end,
		)
		for i, (url, protocol, resource_type, start, end) in enumerate(TIMINGS)
	]


def main():
	requests = build_requests()
	for allowed in (0, 2):
		print(f'🔍 Quiet periods with at most {allowed} inflight requests:')
		for period in NetworkMonitor.find_network_quiet_periods(requests, allowed, end_time=5000):
			print(f'   {period.start:>7.0f}ms -> {period.end:>7.0f}ms ({period.duration:.0f}ms)')


if __name__ == '__main__':
	main()
