from network_monitor.config import CONFIG
from network_monitor.emitter import EventEmitter
from network_monitor.events import (
	NetworkMonitorEvent,
	NetworkRequestFinishedEvent,
	NetworkRequestStartedEvent,
	NetworkStatusEvent,
)
from network_monitor.logging_config import setup_logging
from network_monitor.quiet_periods import find_network_quiet_periods
from network_monitor.service import NetworkMonitor
from network_monitor.transport import ProtocolSession, RequestLedger, TargetManager
from network_monitor.url_utils import is_non_network_protocol, is_websocket_protocol
from network_monitor.views import FrameNavigation, NavigationUrls, NetworkRequest, QuietPeriod, ResourcePriority

if CONFIG.NETWORK_MONITOR_SETUP_LOGGING:
	setup_logging()

__all__ = [
	'CONFIG',
	'EventEmitter',
	'FrameNavigation',
	'NavigationUrls',
	'NetworkMonitor',
	'NetworkMonitorEvent',
	'NetworkRequest',
	'NetworkRequestFinishedEvent',
	'NetworkRequestStartedEvent',
	'NetworkStatusEvent',
	'ProtocolSession',
	'QuietPeriod',
	'RequestLedger',
	'ResourcePriority',
	'TargetManager',
	'find_network_quiet_periods',
	'is_non_network_protocol',
	'is_websocket_protocol',
	'setup_logging',
]
