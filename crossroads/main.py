import asyncio
import time
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager, suppress

from crossroads.application.commands import (
    PauseCommand, ResumeCommand, StopCommand, RequestArrivalCommand
)
from crossroads.domain.errors import CollisionDetected
from crossroads.domain.models import ControllerView, Lane, LaneView, TrafficSnapshot
from crossroads.io.logging_utils import logger, setup_logging
from crossroads.kernel.simulation_kernel import SimulationKernel

# Initialize Kernel
kernel = SimulationKernel()

# Background task for simulation loop
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    kernel.initialize()
    loop_task = asyncio.create_task(run_simulation())
    app.state.simulation_task = loop_task
    yield
    loop_task.cancel()
    with suppress(asyncio.CancelledError):
        await loop_task

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

async def run_simulation():
    """Ticks the kernel in step with real time until the run is over"""
    dt = kernel.config.tick_ms / 1000.0

    while True:
        start_time = time.time()

        try:
            running = kernel.run_tick()
        except CollisionDetected as exc:
            logger.error("Simulation halted: %s", exc)
            return
        if not running:
            logger.info("Simulation loop stopped: %s", kernel.state.finish_reason)
            return

        elapsed = time.time() - start_time
        await asyncio.sleep(max(0.0, dt - elapsed))

@app.get("/api/state", response_model=TrafficSnapshot)
async def get_state():
    """Returns both lanes with their vehicles, the light phases and run status"""
    return kernel.snapshot()

@app.get("/api/lanes/{lane}", response_model=LaneView)
async def get_lane(lane: Lane):
    """Returns one lane's vehicles, lead vehicle first"""
    return kernel.snapshot_builder.build_lane(lane, kernel.lanes, kernel.strategy.signal_states())

@app.get("/api/controller", response_model=ControllerView)
async def get_controller():
    """Returns the controller's view: strategy, signals and shadow records"""
    return kernel.controller_view()

@app.post("/api/simulation/pause")
async def pause_simulation():
    kernel.queue_command(PauseCommand())
    return {"status": "Pause queued"}

@app.post("/api/simulation/resume")
async def resume_simulation():
    kernel.queue_command(ResumeCommand())
    return {"status": "Resume queued"}

@app.post("/api/simulation/stop")
async def stop_simulation():
    kernel.queue_command(StopCommand())
    return {"status": "Stop queued"}

@app.post("/api/lanes/{lane}/arrivals")
async def request_arrival(lane: Lane):
    """Asks for one more vehicle on the lane; it enters once the entry has room"""
    kernel.queue_command(RequestArrivalCommand(lane))
    return {"status": "Arrival queued", "lane": lane}

@app.get("/")
def read_root():
    return {"status": "Crossroads simulator running", "strategy": kernel.settings.strategy}
