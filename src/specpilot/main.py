from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_fastapi_instrumentator import Instrumentator

from specpilot.api.routes.codegen import router as codegen_router
from specpilot.api.routes.github import router as github_router
from specpilot.api.routes.prompts import router as prompts_router
from specpilot.api.routes.providers import router as providers_router
from specpilot.api.routes.specs import router as specs_router
from specpilot.api.routes.webhooks import router as webhooks_router
from specpilot.config import get_settings
from specpilot.logging_config import configure_logging
from specpilot.services.polling_controller import PollingRegistry
from specpilot.tracing import configure_tracing

# ------------------------------------------------------------------
# Configure Observability
# ------------------------------------------------------------------
configure_logging()
configure_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.polling_registry = PollingRegistry(get_settings().poll_interval_seconds)
    yield
    # Polling tasks must not outlive the app
    await app.state.polling_registry.shutdown()


app = FastAPI(title="SpecPilot", lifespan=lifespan)

app.include_router(providers_router)
app.include_router(prompts_router)
app.include_router(specs_router)
app.include_router(webhooks_router)
app.include_router(codegen_router)
app.include_router(github_router)

# ------------------------------------------------------------------
# Observability
# ------------------------------------------------------------------
FastAPIInstrumentor.instrument_app(app)
Instrumentator().instrument(app).expose(app)


# ------------------------------------------------------------------
# Health Check
# ------------------------------------------------------------------
@app.get("/health")
def health_check():
    return {"status": "ok"}
