from __future__ import annotations
from dataclasses import asdict

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from canvaschat.config import load_settings
from canvaschat.errors import DirectlyConnectedSelection, EmptySelection
from canvaschat.services import chat
from canvaschat.services.graph import graph_store
from canvaschat.api.schemas import ChatIn, ChatOut, ReloadIn, SaveIn

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/graph/stats")
def graph_stats():
    return graph_store.stats()


@router.post("/reload")
def reload(payload: ReloadIn):
    try:
        stats = graph_store.reload(payload.canvas)
    except (OSError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "ok", "canvas": payload.canvas, **stats}


@router.post("/save")
def save(payload: SaveIn):
    try:
        graph_store.save(payload.canvas)
    except OSError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "ok", "canvas": payload.canvas}


@router.post("/chat", response_model=ChatOut)
async def chat_with_selection(payload: ChatIn):
    try:
        settings = load_settings(
            model=payload.model,
            system_prompt=payload.system_prompt,
            max_tokens=payload.max_tokens,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if payload.node_ids:
        try:
            graph_store.set_selection(payload.node_ids)
        except KeyError as e:
            raise HTTPException(status_code=404, detail=str(e))

    try:
        # resolved through the module so tests can monkeypatch chat.handle_chat
        outcomes = await chat.handle_chat(graph_store, settings)
    except EmptySelection as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DirectlyConnectedSelection as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"results": [asdict(o) for o in outcomes]}
