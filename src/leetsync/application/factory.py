"""
Agent Factory
Centralizes wiring of the remote client, the host bridge and the session manager.
"""

from leetsync.application.config import AppConfig
from leetsync.application.session import SessionManager
from leetsync.domain.interfaces import HostBridge
from leetsync.infrastructure.adapters.host_bridge import HttpHostBridge, StaticHostBridge
from leetsync.infrastructure.adapters.remote_client import RemoteClient


def get_remote_client(config: AppConfig) -> RemoteClient:
    return RemoteClient(
        base_url=config.api_url,
        timeout=config.request_timeout,
        max_challenge_attempts=config.max_challenge_attempts,
    )


def get_host_bridge(config: AppConfig) -> HostBridge:
    """
    Returns the host bridge for the config: a configured username wins over
    asking the host page.
    """
    if config.username or not config.host_url:
        return StaticHostBridge(config.username)
    return HttpHostBridge(config.host_url)


def get_session_manager(config: AppConfig, client: RemoteClient | None = None) -> SessionManager:
    return SessionManager(
        store=client or get_remote_client(config),
        host=get_host_bridge(config),
        busy_policy=config.busy_policy,
    )
