from __future__ import annotations
import logging
import csv
import io
from contextlib import asynccontextmanager
import httpx
from fastapi import Depends, FastAPI, Request, Body, status
from fastapi.responses import JSONResponse, Response

from citycast.config import get_settings
from citycast.db import create_db_and_tables, make_engine
from citycast.errors import ValidationError
from citycast.services.gateway import FetchGateway
from citycast.services.history_store import HistoryStore
from citycast.services.orchestrator import SearchOrchestrator
from citycast.services.weather import WeatherLookupClient
from citycast.state import Failed, state_to_dict

logger = logging.getLogger(__name__)

POPULAR_CITIES = [
    {"name": "Paris", "country": "FR"},
    {"name": "London", "country": "GB"},
    {"name": "New York", "country": "US"},
    {"name": "Tokyo", "country": "JP"},
    {"name": "Sydney", "country": "AU"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    engine = make_engine(settings.database_url)
    create_db_and_tables(engine)

    http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    lookup = WeatherLookupClient(http_client, user_agent=settings.user_agent)
    orchestrator = SearchOrchestrator(FetchGateway(lookup), HistoryStore(engine))
    restored = orchestrator.restore()
    logger.info("Restored %d recent searches", len(restored))

    app.state.orchestrator = orchestrator
    try:
        yield
    finally:
        await app.state.orchestrator.drain()
        await http_client.aclose()
        engine.dispose()


app = FastAPI(title="Citycast", lifespan=lifespan)


async def get_orchestrator(request: Request) -> SearchOrchestrator:
    return request.app.state.orchestrator


def _snapshot(orch: SearchOrchestrator) -> dict:
    return {
        "query": orch.query,
        "state": state_to_dict(orch.state),
        "history": list(orch.history),
    }


async def _finish(orch: SearchOrchestrator, task) -> JSONResponse:
    # Shared tail of search / replay / refresh.
    outcome = await task
    if outcome is None:
        return JSONResponse(
            {"error": "Result was cleared or superseded by a newer search.", **_snapshot(orch)},
            status_code=status.HTTP_409_CONFLICT,
        )
    code = status.HTTP_502_BAD_GATEWAY if isinstance(outcome, Failed) else status.HTTP_200_OK
    return JSONResponse(_snapshot(orch), status_code=code)


@app.get("/api/state")
async def read_state(orch: SearchOrchestrator = Depends(get_orchestrator)):
    return _snapshot(orch)


@app.post("/api/search")
async def search(
    q: str = Body(..., embed=True),
    orch: SearchOrchestrator = Depends(get_orchestrator),
):
    try:
        task = orch.submit(q)
    except ValidationError as e:
        return JSONResponse({"error": "Please enter a city name.", "detail": str(e)}, status_code=400)
    return await _finish(orch, task)


@app.post("/api/history/replay")
async def replay(
    city: str = Body(..., embed=True),
    orch: SearchOrchestrator = Depends(get_orchestrator),
):
    try:
        task = orch.replay(city)
    except ValidationError as e:
        return JSONResponse({"error": "Please enter a city name.", "detail": str(e)}, status_code=400)
    return await _finish(orch, task)


@app.post("/api/refresh")
async def refresh(orch: SearchOrchestrator = Depends(get_orchestrator)):
    task = orch.refresh()
    if task is None:
        return _snapshot(orch)
    return await _finish(orch, task)


@app.delete("/api/result")
async def clear_result(orch: SearchOrchestrator = Depends(get_orchestrator)):
    orch.clear_result()
    return _snapshot(orch)


@app.get("/api/history")
async def history(orch: SearchOrchestrator = Depends(get_orchestrator)):
    return {"history": list(orch.history)}


@app.delete("/api/history")
async def clear_history(orch: SearchOrchestrator = Depends(get_orchestrator)):
    orch.clear_history()
    return {"history": list(orch.history)}


@app.delete("/api/history/{city:path}")
async def forget(city: str, orch: SearchOrchestrator = Depends(get_orchestrator)):
    if not orch.forget(city):
        return JSONResponse({"error": "Not in recent searches."}, status_code=404)
    return {"history": list(orch.history)}


@app.get("/api/popular")
def popular():
    return {"cities": POPULAR_CITIES}


@app.get("/export/json")
async def export_json(orch: SearchOrchestrator = Depends(get_orchestrator)):
    payload = [{"position": i, "city": city} for i, city in enumerate(orch.history)]
    return JSONResponse(
        payload,
        headers={"Content-Disposition": 'attachment; filename="recent_searches.json"'}
    )


@app.get("/export/csv")
async def export_csv(orch: SearchOrchestrator = Depends(get_orchestrator)):
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["position", "city"])
    for i, city in enumerate(orch.history):
        writer.writerow([i, city])
    return Response(
        buf.getvalue(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="recent_searches.csv"'}
    )
