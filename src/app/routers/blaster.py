# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Blaster control API — snapshot, commands, reset, run statistics."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, HTTPException, Request
from loguru import logger
from pydantic import BaseModel

router = APIRouter(prefix="/api/blaster", tags=["blaster"])


class Command(BaseModel):
    action: Literal[
        "select_character",
        "move_left",
        "move_right",
        "tap_left",
        "tap_right",
        "stop",
        "set_aim_point",
        "set_firing",
        "trigger_special",
        "pause",
        "resume",
        "quit",
    ]
    held: bool = True
    x: float | None = None
    y: float | None = None
    firing: bool | None = None
    character: str | None = None


def _get_game(request: Request):
    """Retrieve the BlasterGame from app state."""
    game = getattr(request.app.state, "blaster_game", None)
    if game is None:
        raise HTTPException(503, "Blaster game not available")
    return game


def _dispatch(game, cmd: Command) -> bool:
    action = cmd.action
    if action == "select_character":
        if not cmd.character:
            raise HTTPException(400, "select_character requires 'character'")
        return game.select_character(cmd.character)
    if action == "move_left":
        return game.move_left(cmd.held)
    if action == "move_right":
        return game.move_right(cmd.held)
    if action == "set_aim_point":
        if cmd.x is None or cmd.y is None:
            raise HTTPException(400, "set_aim_point requires 'x' and 'y'")
        return game.set_aim_point(cmd.x, cmd.y)
    if action == "set_firing":
        if cmd.firing is None:
            raise HTTPException(400, "set_firing requires 'firing'")
        return game.set_firing(cmd.firing)
    return getattr(game, action)()


@router.get("/state")
async def get_state(request: Request):
    """Current per-tick snapshot."""
    game = _get_game(request)
    return game.snapshot()


@router.post("/command")
async def post_command(cmd: Command, request: Request):
    """Issue one input command to the running game."""
    game = _get_game(request)
    try:
        accepted = _dispatch(game, cmd)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc
    if not accepted:
        raise HTTPException(409, f"Cannot {cmd.action} in state: {game.state}")
    logger.debug(f"Command {cmd.action} accepted")
    return {"status": "ok", "action": cmd.action, "state": game.state}


@router.post("/reset")
async def reset_game(request: Request):
    """Back to character select with fresh stats."""
    game = _get_game(request)
    game.reset()
    return {"status": "reset", "state": game.state}


@router.get("/stats")
async def get_stats(request: Request):
    """Run statistics plus the rewards of a finished run."""
    game = _get_game(request)
    return {
        "state": game.state,
        "score": game.score,
        "stats": game.stats.to_dict(),
        "rewards": game.director.rewards_delivered,
    }
