"""Action providers: the provider contract and the built-in integrations."""

from flowrun.providers.base import (
    Provider,
    ProviderInput,
    call_provider,
    is_skipped,
    require_credential,
    skipped,
)
from flowrun.providers.logic import execute_if_condition, execute_loop, execute_switch
from flowrun.providers.set_variable import SET_VARIABLE_APP_ID, execute_set_variable
from flowrun.providers.slack import SlackProvider
from flowrun.providers.triggers import execute_manual, execute_schedule
from flowrun.providers.webhook import WebhookProvider

__all__ = [
    "Provider",
    "ProviderInput",
    "call_provider",
    "is_skipped",
    "require_credential",
    "skipped",
    "SET_VARIABLE_APP_ID",
    "execute_set_variable",
    "execute_if_condition",
    "execute_switch",
    "execute_loop",
    "execute_manual",
    "execute_schedule",
    "SlackProvider",
    "WebhookProvider",
]
