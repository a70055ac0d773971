"""Slack provider.

Calls the Slack Web API with a bot token taken from the node's credential
(``botToken``, ``token`` or ``accessToken``).
"""

from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field

from flowrun.providers.base import ProviderInput, require_credential, skipped
from flowrun.utils.errors import ProviderError

SLACK_API_URL = "https://slack.com/api"


class SlackAuth(BaseModel):
    bot_token: str = Field(min_length=1)


def _required(config: Dict[str, Any], key: str, action_id: str, strip: bool = True) -> str:
    value = str(config.get(key) or "")
    if strip:
        value = value.strip()
    if not value:
        raise ProviderError(f"Slack {action_id} requires {key}")
    return value


class SlackProvider:
    """Provider for ``appId == "slack"``.

    Supported actions: send_message, send_blocks, send_dm, add_reaction,
    update_message.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        base_url: str = SLACK_API_URL,
        timeout_seconds: float = 30.0,
    ):
        self.transport = transport
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    async def __call__(self, input: ProviderInput) -> Dict[str, Any]:
        credential = require_credential(input, "Slack")
        auth = SlackAuth.model_validate(
            {
                "bot_token": credential.get("botToken")
                or credential.get("token")
                or credential.get("accessToken")
                or ""
            }
        )
        token = auth.bot_token
        config = input.config
        action_id = input.action_id

        if action_id == "send_message":
            channel = _required(config, "channel", action_id)
            text = _required(config, "text", action_id, strip=False)
            body: Dict[str, Any] = {"channel": channel, "text": text}
            if config.get("username"):
                body["username"] = str(config["username"])
            if config.get("iconEmoji"):
                body["icon_emoji"] = str(config["iconEmoji"])
            if config.get("threadTs"):
                body["thread_ts"] = str(config["threadTs"])
            data = await self._post(token, "chat.postMessage", body)
            return self._message_result(data)

        if action_id == "send_blocks":
            channel = _required(config, "channel", action_id)
            text = _required(config, "text", action_id, strip=False)
            blocks = config.get("blocks")
            if not isinstance(blocks, list):
                raise ProviderError("Slack send_blocks requires blocks as JSON array")
            data = await self._post(
                token, "chat.postMessage", {"channel": channel, "text": text, "blocks": blocks}
            )
            return self._message_result(data)

        if action_id == "send_dm":
            user = _required(config, "user", action_id)
            text = _required(config, "text", action_id, strip=False)
            opened = await self._post(token, "conversations.open", {"users": user})
            channel_id = (opened.get("channel") or {}).get("id")
            if not channel_id:
                raise ProviderError("Slack conversations.open did not return a channel id")
            data = await self._post(
                token, "chat.postMessage", {"channel": channel_id, "text": text}
            )
            return self._message_result(data)

        if action_id == "add_reaction":
            channel = _required(config, "channel", action_id)
            timestamp = _required(config, "timestamp", action_id)
            emoji = _required(config, "emoji", action_id)
            data = await self._post(
                token,
                "reactions.add",
                {"channel": channel, "timestamp": timestamp, "name": emoji},
            )
            return {"ok": True, "raw": data}

        if action_id == "update_message":
            channel = _required(config, "channel", action_id)
            ts = _required(config, "ts", action_id)
            text = _required(config, "text", action_id, strip=False)
            data = await self._post(
                token, "chat.update", {"channel": channel, "ts": ts, "text": text}
            )
            return self._message_result(data)

        return skipped(f"Slack action not implemented: {action_id}")

    async def _post(self, token: str, method: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST a Web API method and return the decoded payload.

        Raises:
            ProviderError: On a non-2xx response or ``ok: false``
        """
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds, transport=self.transport
        ) as client:
            response = await client.post(
                f"{self.base_url}/{method}",
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
                json=body,
            )

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success or data.get("ok") is False:
            raise ProviderError(
                f"Slack API error: {data.get('error') or response.reason_phrase}",
                status_code=response.status_code,
            )
        return data

    @staticmethod
    def _message_result(data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "ok": True,
            "channel": data.get("channel"),
            "ts": data.get("ts"),
            "message": data.get("message"),
        }
