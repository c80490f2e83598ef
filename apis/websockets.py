from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from sqlmodel import Session
from database import get_session
from helpers.auth import resolve_token, get_owned_board
from models.auth import User
from ws_service.manager import manager
from settings import logger
import json

router = APIRouter(tags=["websockets"])


@router.websocket("/ws/boards/{board_id}")
async def board_events(
    websocket: WebSocket,
    board_id: str,
    token: str = None,
    db_session: Session = Depends(get_session)
):
    """
    WebSocket endpoint streaming change events for one board.

    Query parameter:
    - token: bearer access token of the board owner
    """
    try:
        if not token:
            raise HTTPException(status_code=401, detail="Access token required")
        auth_token = await resolve_token(token, db_session)
        user = db_session.get(User, auth_token.user_id)
        if not user:
            raise HTTPException(status_code=401, detail="Token user no longer exists")
        get_owned_board(board_id, user, db_session)
    except HTTPException as e:
        logger.warning("WebSocket authentication failed", extra={
            "board_id": board_id,
            "error": e.detail
        })
        await websocket.close(code=1008, reason="Authentication failed")
        return
    finally:
        # Release the pooled connection before the long-lived receive loop
        db_session.close()

    await manager.connect(websocket, board_id)

    try:
        await manager.send_to_connection(websocket, board_id, {
            "type": "connection_established",
            "board_id": board_id,
            "active_connections": manager.get_connection_count(board_id)
        })

        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning("Invalid JSON received from WebSocket client", extra={
                    "data": data[:100] + "..." if len(data) > 100 else data
                })
                continue

            if message.get("type") == "ping":
                await manager.send_to_connection(websocket, board_id, {
                    "type": "pong",
                    "timestamp": message.get("timestamp"),
                    "server_time": datetime.now(timezone.utc).isoformat()
                })
            else:
                logger.debug("Unknown WebSocket message type", extra={
                    "message_type": message.get("type")
                })

    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, board_id)


@router.get("/ws/stats")
async def get_websocket_stats():
    """Get WebSocket connection statistics."""
    return {
        "active_connections": manager.get_connection_count(),
        "watched_boards": len(manager.active_connections),
        "status": "running"
    }
