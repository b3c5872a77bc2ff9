# isclink/app/runner.py
from __future__ import annotations

import logging
from functools import partial
from typing import Optional

from isclink.app.config import CommunicatorConfig
from isclink.core.errors import ConfigError
from isclink.runtime.communicator import TcpCommunicator
from isclink.runtime.retry_timer import TimerFactory
from isclink.transport.errors import TransportError
from isclink.transport.registry import TransportDriverRegistry


def build_communicator(
    config: CommunicatorConfig,
    *,
    drivers: Optional[TransportDriverRegistry] = None,
    logger: Optional[logging.Logger] = None,
    timer_factory: Optional[TimerFactory] = None,
) -> TcpCommunicator:
    """
    Construct (but do not connect) a communicator from config.

    `drivers` is injectable to support testing and custom transports.
    """
    drivers = drivers or TransportDriverRegistry.default()
    try:
        drivers.get_class(config.driver)
    except TransportError as e:
        raise ConfigError(
            f"Unknown transport driver '{config.driver}'.",
            hint=f"Known drivers: {', '.join(drivers.names())}",
            details={"driver": config.driver, "error": str(e)},
        ) from None

    factory = partial(
        drivers.create,
        config.driver,
        buffer_size=config.buffer_size,
        connect_timeout_s=config.connect_timeout_s,
    )

    return TcpCommunicator(
        config.id,
        host=config.host,
        port=config.port,
        transport_factory=factory,
        logger=logger,
        debug_level=config.debug_level,
        retry_delay_s=config.retry_delay_s,
        timer_factory=timer_factory,
    )
