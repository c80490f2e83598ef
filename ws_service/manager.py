from fastapi import WebSocket
from typing import Dict, List, Any
import json
from settings import logger


class ConnectionManager:
    """Tracks WebSocket clients per board and pushes board events to them."""

    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, board_id: str):
        """Accept a connection and subscribe it to a board."""
        await websocket.accept()
        self.active_connections.setdefault(board_id, []).append(websocket)
        logger.info("WebSocket connection established", extra={
            "board_id": board_id,
            "board_connections": len(self.active_connections[board_id])
        })

    def disconnect(self, websocket: WebSocket, board_id: str):
        """Remove a connection from a board's subscribers."""
        connections = self.active_connections.get(board_id, [])
        if websocket in connections:
            connections.remove(websocket)
            logger.info("WebSocket connection closed", extra={
                "board_id": board_id,
                "board_connections": len(connections)
            })
        if not connections:
            self.active_connections.pop(board_id, None)

    async def broadcast_board_event(self, board_id: str, event_type: str, **payload: Any):
        """Send an event to every client watching the board."""
        connections = self.active_connections.get(board_id)
        if not connections:
            logger.debug("No WebSocket clients watching board", extra={"board_id": board_id})
            return

        message = json.dumps({"type": event_type, "board_id": board_id, **payload}, default=str)
        logger.info("Broadcasting board event", extra={
            "board_id": board_id,
            "event_type": event_type,
            "connection_count": len(connections)
        })

        disconnected_connections = []
        # Iterate over a copy; failed sends mutate the list
        for connection in list(connections):
            try:
                await connection.send_text(message)
            except Exception as e:
                logger.warning("Failed to send event to WebSocket client", extra={
                    "board_id": board_id,
                    "error": str(e)
                })
                disconnected_connections.append(connection)

        for connection in disconnected_connections:
            self.disconnect(connection, board_id)

    async def send_to_connection(self, websocket: WebSocket, board_id: str, message: Dict[str, Any]):
        """Send a message to a single connection."""
        try:
            await websocket.send_text(json.dumps(message, default=str))
        except Exception as e:
            logger.warning("Failed to send message to specific WebSocket client", extra={
                "board_id": board_id,
                "error": str(e)
            })
            self.disconnect(websocket, board_id)

    def get_connection_count(self, board_id: str = None) -> int:
        """Number of connections for one board, or across all boards."""
        if board_id is not None:
            return len(self.active_connections.get(board_id, []))
        return sum(len(connections) for connections in self.active_connections.values())


# Global manager instance
manager = ConnectionManager()
