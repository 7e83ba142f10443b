"""
User Tools - profile, storage and notifications of the authenticated user.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from ..errors import ApiRequestError
from .base import (
    ResponseType,
    ToolDefinition,
    ToolHandler,
    ToolInput,
    ToolProvider,
    define_tool,
    format_date,
    format_text_response,
    pagination_text,
)

MAX_RESULTS = 50
MB = 1024 * 1024
GB = 1024 * MB
DEFAULT_QUOTA_BYTES = 10 * GB
HIGH_USAGE_PERCENT = 80


class NoArgsInput(ToolInput):
    pass


class UpdateUserProfileInput(ToolInput):
    first_name: Optional[str] = Field(default=None, alias="firstName", description="First name")
    last_name: Optional[str] = Field(default=None, alias="lastName", description="Last name")
    position: Optional[str] = Field(default=None, description="Job title/position")
    department: Optional[str] = Field(default=None, description="Department within institution")
    organization_type: Optional[str] = Field(
        default=None, alias="organizationType", description="Type of organization"
    )
    bio: Optional[str] = Field(default=None, description="Professional biography")


class ChangePasswordInput(ToolInput):
    current_password: str = Field(..., alias="currentPassword", description="Current password")
    new_password: str = Field(..., alias="newPassword", description="New password")


class GetNotificationsInput(ToolInput):
    page: int = Field(default=1, description="Page number (default: 1)")
    limit: int = Field(default=20, description="Notifications per page (default: 20)")
    unread_only: bool = Field(default=False, alias="unreadOnly", description="Show only unread notifications")


class NotificationIdInput(ToolInput):
    notification_id: str = Field(..., alias="notificationId", description="ID of notification to mark as read")


def _bytes(value: Any, default: int = 0) -> int:
    # Storage sizes arrive as strings (BigInt on the backend)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


class UserTools(ToolProvider):
    """Account management for the authenticated user (authentication required)."""

    def list_definitions(self) -> List[ToolDefinition]:
        return [
            define_tool("get_user_profile", "Get current user's complete profile and statistics", NoArgsInput),
            define_tool("update_user_profile", "Update user profile information", UpdateUserProfileInput),
            define_tool("change_password", "Change user password", ChangePasswordInput),
            define_tool("get_user_storage", "Check storage usage and quota information", NoArgsInput),
            define_tool("get_notifications", "Get user notifications with pagination", GetNotificationsInput),
            define_tool("get_unread_count", "Get count of unread notifications", NoArgsInput),
            define_tool("mark_notification_read", "Mark a specific notification as read", NotificationIdInput),
            define_tool("mark_all_read", "Mark all notifications as read", NoArgsInput),
        ]

    def list_handlers(self) -> Dict[str, ToolHandler]:
        return {
            "get_user_profile": self.bind(NoArgsInput, self.get_user_profile),
            "update_user_profile": self.bind(UpdateUserProfileInput, self.update_user_profile),
            "change_password": self.bind(ChangePasswordInput, self.change_password),
            "get_user_storage": self.bind(NoArgsInput, self.get_user_storage),
            "get_notifications": self.bind(GetNotificationsInput, self.get_notifications),
            "get_unread_count": self.bind(NoArgsInput, self.get_unread_count),
            "mark_notification_read": self.bind(NotificationIdInput, self.mark_notification_read),
            "mark_all_read": self.bind(NoArgsInput, self.mark_all_read),
        }

    async def get_user_profile(self, args: NoArgsInput) -> ResponseType:
        user = (await self.client.request("/users/me")).get("data") or {}
        counts = user.get("_count") or {}

        return format_text_response(
            "👤 **User Profile**\n\n"
            f"**Name:** {user.get('firstName') or ''} {user.get('lastName') or ''}\n"
            f"**Username:** @{user.get('username')}\n"
            f"**Email:** {user.get('email')}\n"
            f"**Verified:** {'✅ Yes' if user.get('isVerified') else '❌ No'}\n"
            f"**Position:** {user.get('position') or 'Not specified'}\n"
            f"**Department:** {user.get('department') or 'Not specified'}\n"
            f"**Organization Type:** {user.get('organizationType') or 'Not specified'}\n"
            f"**Member Since:** {format_date(user.get('createdAt'))}\n\n"
            "**Statistics:**\n"
            f"• Papers: {counts.get('papers') or 0}\n"
            f"• Reviews: {counts.get('reviews') or 0}\n"
            f"• Citations: {counts.get('citations') or 0}\n"
            f"• API Keys: {len(user.get('apiKeys') or [])}\n\n"
            "**Storage:**\n"
            f"• Used: {round(_bytes(user.get('storageUsedBytes')) / MB)} MB\n"
            f"• Quota: {round(_bytes(user.get('storageQuotaBytes'), DEFAULT_QUOTA_BYTES) / GB)} GB"
        )

    async def update_user_profile(self, args: UpdateUserProfileInput) -> ResponseType:
        body = {k: v for k, v in args.model_dump(by_alias=True).items() if v}
        user = (await self.client.request("/users/me", method="PUT", json=body)).get("data") or {}

        return format_text_response(
            "✅ **Profile Updated Successfully!**\n\n"
            "**Updated Information:**\n"
            f"• Name: {user.get('firstName') or ''} {user.get('lastName') or ''}\n"
            f"• Position: {user.get('position') or 'Not specified'}\n"
            f"• Department: {user.get('department') or 'Not specified'}\n"
            f"• Organization: {user.get('organizationType') or 'Not specified'}\n"
            f"• Last Updated: {format_date(user.get('updatedAt'), with_time=True)}"
        )

    async def change_password(self, args: ChangePasswordInput) -> ResponseType:
        body = args.model_dump(by_alias=True)
        try:
            await self.client.request("/users/me/password", method="PUT", json=body)
        except ApiRequestError as e:
            if e.status_code == 400:
                raise ApiRequestError(f"Password change failed: {e}", 400) from e
            raise

        return format_text_response(
            "🔒 **Password Changed Successfully!**\n\n"
            "Your password has been updated. Please use the new password for future logins.\n\n"
            "**Security Tips:**\n"
            "• Use a strong, unique password\n"
            "• Consider using a password manager\n"
            "• Enable two-factor authentication if available"
        )

    async def get_user_storage(self, args: NoArgsInput) -> ResponseType:
        storage = (await self.client.request("/users/me/storage")).get("data") or {}
        used = _bytes(storage.get("storageUsedBytes"))
        quota = _bytes(storage.get("storageQuotaBytes"), DEFAULT_QUOTA_BYTES) or DEFAULT_QUOTA_BYTES
        used_mb = round(used / MB)
        quota_gb = round(quota / GB)
        percent = round(used / quota * 100)

        if percent > HIGH_USAGE_PERCENT:
            status = "⚠️ **Warning:** Storage usage is high. Consider cleaning up old files."
        else:
            status = "✅ Storage usage is within normal limits."

        return format_text_response(
            "💾 **Storage Information**\n\n"
            f"**Usage:** {used_mb} MB / {quota_gb} GB ({percent}%)\n"
            f"**Available:** {quota_gb * 1024 - used_mb} MB remaining\n\n"
            "**File Breakdown:**\n"
            f"• Papers: {storage.get('paperCount') or 0} files\n"
            f"• Figures: {storage.get('figureCount') or 0} files\n"
            f"• Datasets: {storage.get('datasetCount') or 0} files\n"
            f"• Other: {storage.get('otherCount') or 0} files\n\n"
            f"{status}"
        )

    async def get_notifications(self, args: GetNotificationsInput) -> ResponseType:
        params = {
            "page": args.page,
            "limit": min(args.limit, MAX_RESULTS),
            "unreadOnly": "true" if args.unread_only else None,
        }
        data = (await self.client.request("/notifications", params=params)).get("data") or {}
        notifications = data.get("notifications") or []

        if not notifications:
            return format_text_response(
                "🔔 **No Notifications**\n\n"
                f"You have no {'unread ' if args.unread_only else ''}notifications at this time."
            )

        lines = []
        for index, notification in enumerate(notifications, start=1):
            lines.append(
                f"{index}. {'📖' if notification.get('isRead') else '🔔'} **{notification.get('title')}**\n"
                f"   {notification.get('message')}\n"
                f"   {format_date(notification.get('createdAt'), with_time=True)} • ID: {notification.get('id')}"
            )

        total_pages = data.get("totalPages") or 1
        return format_text_response(
            f"🔔 **Notifications** ({data.get('totalCount', len(notifications))} total, "
            f"{data.get('unreadCount') or 0} unread, Page {args.page}/{total_pages})\n\n"
            + "\n\n".join(lines)
            + "\n\n**Actions Available:**\n"
            "• Use `mark_notification_read` to mark specific notifications as read\n"
            "• Use `mark_all_read` to mark all notifications as read\n"
            + pagination_text(args.page, total_pages)
        )

    async def get_unread_count(self, args: NoArgsInput) -> ResponseType:
        data = (await self.client.request("/notifications/unread-count")).get("data") or {}
        count = data.get("count") or 0

        if count:
            detail = f"You have {_plural(count, 'unread notification')}. Use `get_notifications` to view them."
        else:
            detail = "All caught up! No unread notifications."
        return format_text_response(f"🔔 **Unread Notifications: {count}**\n\n{detail}")

    async def mark_notification_read(self, args: NotificationIdInput) -> ResponseType:
        try:
            await self.client.request(f"/notifications/{args.notification_id}/read", method="PUT")
        except ApiRequestError as e:
            if e.status_code == 404:
                raise ApiRequestError(f"Notification {args.notification_id} not found", 404) from e
            raise

        return format_text_response(
            "✅ **Notification Marked as Read**\n\n"
            f"Notification {args.notification_id} has been marked as read."
        )

    async def mark_all_read(self, args: NoArgsInput) -> ResponseType:
        data = (await self.client.request("/notifications/read-all", method="PUT")).get("data") or {}
        updated = data.get("updatedCount") or 0

        return format_text_response(
            "✅ **All Notifications Marked as Read**\n\n"
            f"{_plural(updated, 'notification')} marked as read."
        )
