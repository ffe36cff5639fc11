from fastapi import WebSocket
from typing import Dict, Iterable, List, Set
import json
import logging
from datetime import datetime

logger = logging.getLogger(__name__)


class WebSocketManager:
    def __init__(self):
        # Store active connections by user_id
        self.active_connections: Dict[int, Set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, user_id: int):
        """Register an accepted WebSocket for a user"""
        self.active_connections.setdefault(user_id, set()).add(websocket)
        logger.info(f"User {user_id} connected. Total connections: {len(self.active_connections[user_id])}")

        await self.send_personal_message(
            {
                "type": "connection",
                "message": "Connected to refresh channel",
                "timestamp": datetime.utcnow().isoformat(),
            },
            websocket,
        )

    def disconnect(self, websocket: WebSocket, user_id: int):
        """Disconnect a WebSocket for a user"""
        if user_id in self.active_connections:
            self.active_connections[user_id].discard(websocket)

            # Remove user if no more connections
            if not self.active_connections[user_id]:
                del self.active_connections[user_id]

            logger.info(f"User {user_id} disconnected. Remaining connections: {self.get_connection_count(user_id)}")

    async def send_personal_message(self, message: dict, websocket: WebSocket):
        """Send a message to a specific WebSocket connection"""
        await websocket.send_text(json.dumps(message))

    async def send_to_user(self, user_id: int, message: dict):
        """Send a message to all connections of a specific user"""
        disconnected_websockets = set()
        for websocket in list(self.active_connections.get(user_id, set())):
            try:
                await self.send_personal_message(message, websocket)
            except Exception as e:
                logger.error(f"Error sending message to user {user_id}: {e}")
                disconnected_websockets.add(websocket)

        # Clean up disconnected websockets
        for websocket in disconnected_websockets:
            self.disconnect(websocket, user_id)

    async def publish_invalidation(self, user_ids: Iterable[int], resource: str, project_id: int, **extra):
        """Tell connected project members that ``resource`` changed and should be re-fetched"""
        message = {
            "type": "invalidate",
            "resource": resource,
            "project_id": project_id,
            "timestamp": datetime.utcnow().isoformat(),
            **extra,
        }
        for user_id in set(user_ids):
            if user_id in self.active_connections:
                await self.send_to_user(user_id, message)

    def get_connected_users(self) -> List[int]:
        """Get list of currently connected user IDs"""
        return list(self.active_connections.keys())

    def get_connection_count(self, user_id: int) -> int:
        """Get number of active connections for a user"""
        return len(self.active_connections.get(user_id, set()))


# Global instance
websocket_manager = WebSocketManager()
