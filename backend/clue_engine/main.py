import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as aioredis
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .board import Position, classic_board, is_cell, start_cells
from .models import BoardResponse, MovesResponse, PositionRequest, RouteResponse
from .navigator import DEFAULT_MAX_ROUTE_LENGTH, GridNavigator
from .occupancy import Occupancy
from .store import OccupancyStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------

redis_client: aioredis.Redis | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global redis_client
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_client = aioredis.from_url(redis_url, decode_responses=True)
    yield
    await redis_client.aclose()


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(title="Clue Navigation Service", lifespan=lifespan)

_cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_max_route_length = int(os.getenv("NAV_MAX_ROUTE_LENGTH", DEFAULT_MAX_ROUTE_LENGTH))


def _encode(position: Optional[Position]):
    if position is not None and is_cell(position):
        return [position.x, position.y]
    return position


async def _navigator_for(game_id: str, player_id: str) -> tuple[GridNavigator, Position]:
    occupancy: Occupancy = await OccupancyStore(game_id, redis_client).load()
    position = occupancy.position_of(player_id)
    if position is None:
        raise HTTPException(status_code=404, detail="Player is not on the board")
    navigator = GridNavigator(classic_board(), occupancy, max_route_length=_max_route_length)
    return navigator, position


# ---------------------------------------------------------------------------
# REST endpoints
# ---------------------------------------------------------------------------


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.get("/board")
async def get_board() -> BoardResponse:
    topology = classic_board()
    return BoardResponse(
        width=topology.width,
        height=topology.height,
        cells=[[c.x, c.y] for c in sorted(topology.cells)],
        rooms={
            name: {
                "doors": [[d.x, d.y] for d in room.doors],
                "passage": room.passage,
            }
            for name, room in topology.rooms.items()
        },
        start_positions={name: [c.x, c.y] for name, c in start_cells().items()},
    )


@app.get("/games/{game_id}/positions")
async def get_positions(game_id: str):
    occupancy = await OccupancyStore(game_id, redis_client).load()
    return {"positions": {pid: _encode(pos) for pid, pos in occupancy.items()}}


@app.put("/games/{game_id}/positions/{player_id}")
async def place_player(game_id: str, player_id: str, req: PositionRequest):
    topology = classic_board()
    try:
        if req.room is not None:
            position = topology.check(req.room)
        elif req.x is not None and req.y is not None:
            position = topology.check((req.x, req.y))
        else:
            raise ValueError("Either room or both x and y are required")
        occupancy = await OccupancyStore(game_id, redis_client).place(player_id, position)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"positions": {pid: _encode(pos) for pid, pos in occupancy.items()}}


@app.delete("/games/{game_id}/positions/{player_id}")
async def remove_player(game_id: str, player_id: str):
    occupancy = await OccupancyStore(game_id, redis_client).remove(player_id)
    return {"positions": {pid: _encode(pos) for pid, pos in occupancy.items()}}


@app.get("/games/{game_id}/moves")
async def get_moves(game_id: str, player_id: str, steps: int) -> MovesResponse:
    navigator, position = await _navigator_for(game_id, player_id)
    try:
        moves = navigator.available_moves(position, steps)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return MovesResponse(
        player_id=player_id,
        steps=steps,
        cells=[[c.x, c.y] for c in sorted(moves.cells)],
        rooms=sorted(moves.rooms),
        passages=sorted(moves.passages),
    )


@app.get("/games/{game_id}/route")
async def get_route(game_id: str, player_id: str, room: str) -> RouteResponse:
    navigator, position = await _navigator_for(game_id, player_id)
    try:
        path = navigator.find_path_to_room(position, room)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    logger.info(
        "Game %s: route for %s from %s to %s: %s",
        game_id, player_id, position, room,
        "none" if path is None else f"{len(path)} positions",
    )
    return RouteResponse(
        player_id=player_id,
        room=room,
        path=None if path is None else [_encode(p) for p in path],
    )
