"""
WebSocket consumer for live boards.

Clients join the group of one project's board and are told whenever a task
is created, moved or deleted there, so they can re-fetch the affected columns.
"""

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from apps.projects.models import Project
from ..api.serializers import TaskSerializer
from ..columns import board
from .broadcast import board_group_name

logger = logging.getLogger(__name__)


class BoardConsumer(AsyncJsonWebsocketConsumer):

    async def connect(self):
        """Accept the connection if the user can see the project."""
        self.project_id = self.scope["url_route"]["kwargs"]["project_id"]
        self.group_name = board_group_name(self.project_id)

        user = self.scope.get("user")
        if not user or not user.is_authenticated:
            logger.warning("Board socket rejected: anonymous user")
            await self.close(code=4001)
            return

        if not await self.has_project_access(user):
            logger.warning("Board socket rejected: %s cannot see project %s", user, self.project_id)
            await self.close(code=4003)
            return

        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive_json(self, content, **kwargs):
        message_type = content.get("type")
        if message_type == "ping":
            await self.send_json({"type": "pong"})
        elif message_type == "board.fetch":
            await self.send_json({"type": "board.state", "columns": await self.get_board()})
        else:
            await self.send_json({"type": "error", "message": f"Unknown message type: {message_type}"})

    async def board_changed(self, event):
        """Relay a board change broadcast to the socket."""
        await self.send_json({
            "type": "board.changed",
            "project_id": event["project_id"],
            "reason": event["reason"],
            "task_id": event.get("task_id"),
            "columns": event.get("columns", []),
        })

    @database_sync_to_async
    def has_project_access(self, user):
        return Project.objects.visible_to(user).filter(pk=self.project_id).exists()

    @database_sync_to_async
    def get_board(self):
        return {
            status: TaskSerializer(tasks, many=True).data
            for status, tasks in board(self.project_id).items()
        }
