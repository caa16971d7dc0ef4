# tests/test_email_service.py
"""Unit tests for outbound email delivery (best effort, never raises)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock, patch
from app.services import email_service
from app.services.email_service import OutboundEmail, otp_email, queue_emails, send_email

MESSAGE = OutboundEmail(to="alice@example.com", subject="Hi", html="<p>Hi</p>")


def mock_client(post):
    client = MagicMock()
    client.post = post
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_skips_without_api_key(self):
        with patch.object(email_service.settings, "SENDGRID_API_KEY", None), \
             patch("app.services.email_service.httpx.AsyncClient") as client_cls:
            assert await send_email(MESSAGE) is False
            client_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_accepted(self):
        post = AsyncMock(return_value=MagicMock(status_code=202))
        with patch.object(email_service.settings, "SENDGRID_API_KEY", "SG.key"), \
             patch("app.services.email_service.httpx.AsyncClient", return_value=mock_client(post)):
            assert await send_email(MESSAGE) is True
        payload = post.call_args.kwargs["json"]
        assert payload["personalizations"][0]["to"][0]["email"] == "alice@example.com"
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer SG.key"

    @pytest.mark.asyncio
    async def test_provider_error_is_swallowed(self):
        post = AsyncMock(return_value=MagicMock(status_code=401))
        with patch.object(email_service.settings, "SENDGRID_API_KEY", "SG.key"), \
             patch("app.services.email_service.httpx.AsyncClient", return_value=mock_client(post)):
            assert await send_email(MESSAGE) is False

    @pytest.mark.asyncio
    async def test_network_error_is_swallowed(self):
        post = AsyncMock(side_effect=httpx.ConnectError("down"))
        with patch.object(email_service.settings, "SENDGRID_API_KEY", "SG.key"), \
             patch("app.services.email_service.httpx.AsyncClient", return_value=mock_client(post)):
            assert await send_email(MESSAGE) is False


class TestQueue:
    def test_each_message_becomes_a_background_task(self):
        tasks = MagicMock()
        queue_emails(tasks, [MESSAGE, MESSAGE])
        assert tasks.add_task.call_count == 2
        tasks.add_task.assert_called_with(send_email, MESSAGE)

    def test_otp_template_mentions_code(self):
        email = otp_email("a@example.com", "123456", "reset")
        assert "123456" in email.html
        assert email.subject == "Reset Your Password"
