"""Notification service for sending push notifications via ntfy."""

import logging
from typing import Any

import httpx

from src.config import get_settings

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for sending push notifications via ntfy.sh."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.server = self.settings.ntfy_server
        self.topic = self.settings.ntfy_topic
        self.pwa_base_url = self.settings.pwa_base_url
        self.timeout = 10.0

    def _get_notification_url(self) -> str:
        """Get the full ntfy URL for publishing."""
        return f"{self.server}/{self.topic}"

    def _get_review_url(self) -> str:
        """Get the PWA URL of the review screen."""
        return f"{self.pwa_base_url}/review"

    async def send_due_review_digest(self, user_id: int, due_count: int) -> dict[str, Any]:
        """Tell the user how many insights are waiting for review.

        Only the count is sent; insight content never leaves the server.

        Args:
            user_id: ID of the user to notify
            due_count: Number of insights currently due

        Returns:
            dict with success status and any error info
        """
        review_url = self._get_review_url()
        noun = "insight" if due_count == 1 else "insights"

        headers = {
            "Title": "Hora de revisar",
            "Priority": "default",
            "Tags": "books",
            "Click": review_url,
            "Actions": f"view, Revisar, {review_url}",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self._get_notification_url(),
                    content=f"{due_count} {noun} para revisar hoje",
                    headers=headers,
                )
                response.raise_for_status()

                logger.info(f"Sent review digest to user {user_id}: {due_count} due")
                return {
                    "success": True,
                    "user_id": user_id,
                    "due_count": due_count,
                    "review_url": review_url,
                }

        except httpx.HTTPError as e:
            logger.error(f"Failed to send review digest for user {user_id}: {e}")
            return {
                "success": False,
                "user_id": user_id,
                "error": str(e),
            }

    async def send_test_notification(self) -> dict[str, Any]:
        """Send a test notification to verify ntfy is working.

        Returns:
            dict with success status
        """
        headers = {
            "Title": "Clip & Review Test",
            "Priority": "low",
            "Tags": "white_check_mark",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self._get_notification_url(),
                    content="Test notification - ntfy is working!",
                    headers=headers,
                )
                response.raise_for_status()

                logger.info("Sent test notification")
                return {"success": True}

        except httpx.HTTPError as e:
            logger.error(f"Failed to send test notification: {e}")
            return {"success": False, "error": str(e)}
