# server.py

import asyncio
import logging

from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect

from petcore.action_endpoints import bundle_view, check_api_key, router

logger = logging.getLogger(__name__)


def create_app(orchestrator) -> FastAPI:
    app = FastAPI(title="Pocket Pet")
    app.state.orchestrator = orchestrator
    app.include_router(router, dependencies=[Depends(check_api_key)])

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await websocket.accept()
        try:
            while True:
                slot = orchestrator.active_slot
                bundle = await orchestrator.memory.load(slot) if slot else None
                await websocket.send_json({'slot': slot, **bundle_view(bundle)})
                await asyncio.sleep(1)
        except WebSocketDisconnect:
            logger.debug("WebSocket client disconnected")

    return app
