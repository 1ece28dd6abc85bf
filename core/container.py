from dishka import make_async_container
from dishka.integrations.fastapi import FastapiProvider

from core.environment.providers import EnvironmentProvider
from core.logging.providers import LoggerProvider
from token_events.providers import TokenEventsProvider

container = make_async_container(
    FastapiProvider(),
    EnvironmentProvider(),
    LoggerProvider(),
    TokenEventsProvider()
)
