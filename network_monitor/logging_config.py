"""Stream handler setup for the network_monitor logger."""

import logging
import sys

from network_monitor.config import CONFIG

_HANDLER_NAME = 'network_monitor'


def setup_logging(level: str | None = None, force_setup: bool = False) -> logging.Logger:
	"""Attach a stream handler to the `network_monitor` logger.

	Calling it again is a no-op unless `force_setup` is set, in which case the handler and
	level are replaced.
	"""
	log_level = (level or CONFIG.NETWORK_MONITOR_LOGGING_LEVEL).upper()
	logger = logging.getLogger('network_monitor')

	existing = [h for h in logger.handlers if h.get_name() == _HANDLER_NAME]
	if existing and not force_setup:
		return logger
	for handler in existing:
		logger.removeHandler(handler)

	handler = logging.StreamHandler(sys.stdout)
	handler.set_name(_HANDLER_NAME)
	handler.setFormatter(logging.Formatter('%(levelname)-8s [%(name)s] %(message)s'))
	logger.addHandler(handler)
	logger.setLevel(getattr(logging, log_level, logging.INFO))
	logger.propagate = False
	return logger
