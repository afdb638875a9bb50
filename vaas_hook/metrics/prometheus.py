from fastapi import APIRouter, Response
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

metrics_router = APIRouter()

# Standalone registry for the hook
registry = CollectorRegistry()

VAAS_REQUESTS = Counter(
    "vaas_requests_total", "VaaS API requests", ["operation", "status"], registry=registry
)
VAAS_LATENCY = Histogram(
    "vaas_request_latency_seconds", "VaaS API request latency seconds", ["operation"], registry=registry
)
REGISTRATIONS = Counter(
    "vaas_registrations_total", "Backend registrations by outcome", ["outcome"], registry=registry
)
DEREGISTRATIONS = Counter(
    "vaas_deregistrations_total", "Backend deregistrations by outcome", ["outcome"], registry=registry
)
TASK_POLLS = Counter(
    "vaas_task_polls_total", "VaaS task status polls by observed status", ["status"], registry=registry
)


@metrics_router.get("/metrics")
async def metrics():
    data = generate_latest(registry)
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
