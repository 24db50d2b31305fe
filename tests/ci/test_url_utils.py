"""Test scheme classification."""

import pytest

from network_monitor.url_utils import get_url_scheme, is_non_network_protocol, is_websocket_protocol


@pytest.mark.parametrize('protocol', ['data', 'data:', 'blob', 'BLOB', 'intent', 'file', 'filesystem', 'chrome-extension'])
def test_non_network_protocols(protocol):
	assert is_non_network_protocol(protocol) is True


@pytest.mark.parametrize('protocol', ['http/1.1', 'h2', 'h3', 'https', 'ws', '', None])
def test_network_protocols(protocol):
	assert is_non_network_protocol(protocol) is False


def test_websocket_protocols():
	assert is_websocket_protocol('ws') is True
	assert is_websocket_protocol('wss:') is True
	assert is_websocket_protocol('https') is False
	assert is_websocket_protocol(None) is False


def test_get_url_scheme():
	assert get_url_scheme('https://example.com/page.html') == 'https'
	assert get_url_scheme('data:text/javascript,console.log("test")') == 'data'
	assert get_url_scheme('blob:https://example.com/image') == 'blob'
	assert get_url_scheme('relative/path') == ''
	assert get_url_scheme('') == ''


def test_request_classified_by_url_scheme(make_request):
	assert make_request('a', protocol='', url='data:image/png;base64,AAAA').is_non_network_request is True
	assert make_request('b', protocol='blob').is_non_network_request is True
	assert make_request('c').is_non_network_request is False
