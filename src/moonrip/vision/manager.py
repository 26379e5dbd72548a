"""Decide whether cover scoring talks to a local Moondream Station or the cloud.

The server's lifecycle belongs to the user; this module never starts or
kills it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import requests

from moonrip.core.contracts import VisionConfig

from .moondream import MoondreamClient

logger = logging.getLogger(__name__)

ENDPOINT_ENV = "MOONDREAM_ENDPOINT"
API_KEY_ENV = "MOONDREAM_API_KEY"


@dataclass
class VisionSession:
    client: MoondreamClient
    is_local: bool
    endpoint: str


def resolve_vision_config(config: VisionConfig) -> VisionConfig:
    """Layer MOONDREAM_ENDPOINT / MOONDREAM_API_KEY over the file config."""
    update = {}
    if os.environ.get(ENDPOINT_ENV):
        update["endpoint"] = os.environ[ENDPOINT_ENV]
    if os.environ.get(API_KEY_ENV):
        update["api_key"] = os.environ[API_KEY_ENV]
    return config.model_copy(update=update)


def probe_local_server(url: str, timeout: float = 1.0) -> bool:
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException:
        return False
    # Station answers 404 on the bare /v1 root
    return response.ok or response.status_code == 404


def start_vision_service(config: VisionConfig) -> VisionSession:
    config = resolve_vision_config(config)

    if config.endpoint:
        logger.info(f"Using configured Moondream endpoint {config.endpoint}")
        client = MoondreamClient(config.endpoint, config.api_key, config.request_timeout)
        return VisionSession(client=client, is_local=False, endpoint=config.endpoint)

    if probe_local_server(config.local_endpoint, config.probe_timeout):
        logger.info(f"Connected to local Moondream server ({config.local_endpoint})")
        client = MoondreamClient(config.local_endpoint, None, config.request_timeout)
        return VisionSession(client=client, is_local=True, endpoint=config.local_endpoint)

    logger.info("No local Moondream server found, using cloud API")
    if config.api_key:
        logger.info("Moondream API key found")
    else:
        logger.warning(f"{API_KEY_ENV} is not set; cloud requests will likely be rejected")
    client = MoondreamClient(config.cloud_endpoint, config.api_key, config.request_timeout)
    return VisionSession(client=client, is_local=False, endpoint=config.cloud_endpoint)


def stop_vision_service(session: VisionSession | None) -> None:
    if session is None:
        return
    session.client.close()
    logger.debug("Vision session closed")
