"""Thin wrapper utilities around the Slack WebClient."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from slack_sdk import WebClient

_PROFILE_IMAGE_KEYS = (
    "image_original",
    "image_1024",
    "image_512",
    "image_192",
    "image_72",
    "image_48",
    "image_32",
    "image_24",
)


class SlackClient:
    """Encapsulate Slack WebClient interactions for easier testing."""

    def __init__(self, *, token: str | None = None, client: WebClient | None = None) -> None:
        if client is None and token is None:
            raise ValueError("Either an instantiated client or a bot token must be provided.")

        self._client = client or WebClient(token=token)

    @property
    def client(self) -> WebClient:
        """Expose the underlying WebClient for advanced use cases."""

        return self._client

    def post_message(
        self,
        *,
        channel: str,
        text: str,
        attachments: Sequence[Mapping[str, Any]],
        username: str | None = None,
        icon_url: str | None = None,
    ) -> Mapping[str, Any]:
        """Post a message with legacy attachments, optionally under a custom name and icon."""

        kwargs: Dict[str, Any] = {"channel": channel, "text": text, "attachments": list(attachments)}
        if username:
            kwargs["username"] = username
        if icon_url:
            kwargs["icon_url"] = icon_url
        return self._client.chat_postMessage(**kwargs)

    def post_ephemeral(self, *, channel: str, user: str, text: str) -> Mapping[str, Any]:
        """Post a message only *user* can see."""

        return self._client.chat_postEphemeral(channel=channel, user=user, text=text)

    def open_view(self, *, trigger_id: str, view: Mapping[str, Any]) -> Mapping[str, Any]:
        return self._client.views_open(trigger_id=trigger_id, view=dict(view))

    def fetch_history(self, *, channel: str, limit: int) -> List[Dict[str, Any]]:
        """Return a single page of the most recent messages in *channel*."""

        response = self._client.conversations_history(channel=channel, limit=limit)
        return list(response.get("messages") or [])

    def fetch_user(self, user_id: str) -> Dict[str, Any]:
        response = self._client.users_info(user=user_id)
        return dict(response.get("user") or {})


def largest_profile_image(user: Mapping[str, Any]) -> str | None:
    """Pick the biggest avatar URL available on a ``users.info`` user object."""

    profile = user.get("profile") or {}
    for key in _PROFILE_IMAGE_KEYS:
        if profile.get(key):
            return profile[key]
    return None
