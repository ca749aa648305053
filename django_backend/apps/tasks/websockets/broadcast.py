import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def board_group_name(project_id):
    return f"board_{project_id}"


def broadcast_board_change(project_id, reason, **payload):
    """
    Tell every client watching a project's board to re-fetch it.

    Sent after commit; a lost message only delays the refresh, so failures
    are logged and not raised.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False

    try:
        async_to_sync(channel_layer.group_send)(
            board_group_name(project_id),
            {
                "type": "board.changed",
                "project_id": project_id,
                "reason": reason,
                **payload,
            },
        )
    except Exception:
        logger.warning("Board broadcast failed for project %s", project_id, exc_info=True)
        return False
    return True
