"""URL scheme helpers used to decide which requests touch the network."""

NON_NETWORK_SCHEMES: frozenset[str] = frozenset(
	{
		'blob',  # Blob URLs created by the page
		'data',  # Inline data: URLs
		'intent',  # Android intents
		'file',  # Local files
		'filesystem',  # HTML5 sandboxed filesystem
		'chrome-extension',  # Extension resources
	}
)

WEBSOCKET_SCHEMES: frozenset[str] = frozenset({'ws', 'wss'})


def _normalize_scheme(protocol: str | None) -> str:
	if not protocol:
		return ''
	# Accept both 'data' and 'data:' (and whole URLs)
	return protocol.split(':', 1)[0].strip().lower()


def get_url_scheme(url: str | None) -> str:
	"""Return the scheme of a URL without the trailing colon, or '' if there is none."""
	if not url or ':' not in url:
		return ''
	return _normalize_scheme(url)


def is_non_network_protocol(protocol: str | None) -> bool:
	"""Whether the protocol/scheme is served without a network round trip."""
	return _normalize_scheme(protocol) in NON_NETWORK_SCHEMES


def is_websocket_protocol(protocol: str | None) -> bool:
	return _normalize_scheme(protocol) in WEBSOCKET_SCHEMES
