"""FastAPI control surface for the dungeon generator."""

import logging
import threading
from typing import List, Optional

import structlog
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config import settings
from ..core.delaunay import DegenerateGeometryError
from ..core.kruskal import DisconnectedEdgeSetError
from ..core.pipeline import DungeonGenerator, LayoutSnapshot

# Configure logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Dungeon Layout Generator API",
    description="Room scattering, Delaunay triangulation and MST corridors",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One generator per process; sync endpoints run on a thread pool
_generator: Optional[DungeonGenerator] = None
_lock = threading.Lock()


def get_generator() -> DungeonGenerator:
    """Return the process-wide generator, creating it on first use."""
    global _generator
    if _generator is None:
        _generator = DungeonGenerator.from_settings(settings)
    return _generator


# Request/Response models
class RefreshRequest(BaseModel):
    """Request to scatter a new layout."""

    seed: Optional[str] = Field(None, description="Seed for a reproducible layout, random if omitted")


class PointModel(BaseModel):
    x: float
    y: float


class RoomModel(BaseModel):
    """Room as drawn: grid-snapped corner, size and visual status."""

    x: int
    y: int
    width: int
    height: int
    center: PointModel
    status: str


class TriangleModel(BaseModel):
    vertices: List[PointModel]
    center: PointModel
    radius: float


class CorridorModel(BaseModel):
    a: PointModel
    b: PointModel
    length: float
    angle: float = Field(description="Draw angle in degrees")


class LayoutResponse(BaseModel):
    """Full layout for rendering."""

    phase: str
    seed: str
    width: int
    height: int
    rooms: List[RoomModel]
    triangles: List[TriangleModel]
    corridors: List[CorridorModel]


class TickResponse(BaseModel):
    """Outcome of advancing the generator."""

    ticks: int
    phases: List[str] = Field(description="Phase each tick acted in")
    phase: str = Field(description="Phase after the last tick")


def _point(p) -> PointModel:
    return PointModel(x=p.x, y=p.y)


def layout_response(snapshot: LayoutSnapshot) -> LayoutResponse:
    """Convert a generator snapshot into the response model."""
    return LayoutResponse(
        phase=snapshot.phase.value,
        seed=snapshot.seed,
        width=snapshot.width,
        height=snapshot.height,
        rooms=[
            RoomModel(
                x=room.x,
                y=room.y,
                width=room.width,
                height=room.height,
                center=_point(room.center),
                status=room.status.value,
            )
            for room in snapshot.rooms
        ],
        triangles=[
            TriangleModel(
                vertices=[_point(v) for v in t.vertices],
                center=_point(t.circumcircle.center),
                radius=t.circumcircle.radius,
            )
            for t in snapshot.triangles
        ],
        corridors=[
            CorridorModel(a=_point(c.a), b=_point(c.b), length=c.length, angle=c.angle)
            for c in snapshot.corridors
        ],
    )


@app.on_event("startup")
async def startup_event():
    logger.info("Starting Dungeon Layout Generator API")


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Dungeon Layout Generator API",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    with _lock:
        phase = get_generator().phase
    return {"status": "healthy", "phase": phase.value}


@app.post("/refresh", response_model=LayoutResponse)
def refresh(request: RefreshRequest):
    """Discard the current layout and scatter a new one."""
    logger.info("Layout refresh requested", seed=request.seed)
    with _lock:
        generator = get_generator()
        generator.refresh(request.seed)
        return layout_response(generator.snapshot())


@app.post("/tick", response_model=TickResponse)
def tick(steps: int = Query(1, ge=1, le=settings.max_ticks, description="Ticks to advance")):
    """Advance the generator by a number of ticks."""
    with _lock:
        generator = get_generator()
        phases = []
        try:
            for _ in range(steps):
                phases.append(generator.update().value)
        except (DegenerateGeometryError, DisconnectedEdgeSetError) as e:
            logger.error("Tick failed", error=str(e), seed=generator.seed)
            raise HTTPException(status_code=500, detail=f"Generation failed: {str(e)}")
        return TickResponse(ticks=len(phases), phases=phases, phase=generator.phase.value)


@app.post("/run", response_model=LayoutResponse)
def run(max_ticks: int = Query(settings.max_ticks, ge=1, le=settings.max_ticks, description="Tick budget")):
    """Tick until corridors are built (or the budget runs out) and return the layout."""
    with _lock:
        generator = get_generator()
        try:
            generator.run(max_ticks)
        except (DegenerateGeometryError, DisconnectedEdgeSetError) as e:
            logger.error("Run failed", error=str(e), seed=generator.seed)
            raise HTTPException(status_code=500, detail=f"Generation failed: {str(e)}")
        return layout_response(generator.snapshot())


@app.get("/layout", response_model=LayoutResponse)
def get_layout():
    """Current layout, whatever phase it is in."""
    with _lock:
        return layout_response(get_generator().snapshot())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
