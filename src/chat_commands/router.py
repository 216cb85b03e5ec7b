import logging
from functools import lru_cache

from chat_commands.interface import AutomationRequest
from chat_commands.job_reference import parse_job_request
from chat_commands.provider_directive import parse_provider_request
from chat_commands.text import collapse_whitespace
from protocol_config import ProtocolConfig, load_config

logger = logging.getLogger("app.command_router")


class CommandRouter:
    """Turns a chat message into at most one automation request.

    An explicit provider directive beats a job reference, so
    "claude fix https://github.com/o/r/pull/1" stays a provider request and
    keeps the link in its instruction.
    """

    def __init__(self, config: ProtocolConfig | None = None):
        self.config = config or ProtocolConfig()

    def route(self, message: str) -> AutomationRequest | None:
        preview = collapse_whitespace(message or "")[:100]

        provider_request = parse_provider_request(message, self.config)
        if provider_request is not None:
            logger.info(f"Routed to provider {provider_request.provider}: {preview!r}")
            return provider_request

        job_request = parse_job_request(message)
        if job_request is not None:
            logger.info(f"Routed to job {job_request.reference.slug}: {preview!r}")
            return job_request

        logger.debug(f"No command in message: {preview!r}")
        return None


@lru_cache(maxsize=1)
def default_router() -> CommandRouter:
    """Router built from the environment, loaded once per process."""
    return CommandRouter(load_config())


def route(message: str, config: ProtocolConfig | None = None) -> AutomationRequest | None:
    """Route with ``config``, or with the settings from the environment when omitted."""
    if config is not None:
        return CommandRouter(config).route(message)
    return default_router().route(message)
