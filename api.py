"""
HTTP surface: Prometheus telemetry endpoint and a landing page.
"""
from __future__ import annotations

import platform

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, Response
from prometheus_client import CollectorRegistry, Info, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from config import EXPORTER_NAME, VERSION
from metrics import AkkaClusterExporter

LANDING_PAGE = """<html>
<head><title>Akka Cluster HTTP Management Exporter</title></head>
<body>
<h1>Akka Cluster HTTP Management Exporter</h1>
<p><a href='{path}'>Metrics</a></p>
</body>
</html>
"""


def build_registry(exporter: AkkaClusterExporter) -> CollectorRegistry:
    """Dedicated registry holding the exporter and the build info metric."""
    registry = CollectorRegistry()
    registry.register(exporter)
    build = Info(f"{EXPORTER_NAME}_build", f"A metric with a constant '1' value labeled by version of {EXPORTER_NAME}.", registry=registry)
    build.info({"version": VERSION, "pythonversion": platform.python_version()})
    return registry


def create_app(registry: CollectorRegistry, telemetry_path: str = "/metrics") -> FastAPI:
    app = FastAPI(
        title="Akka Cluster HTTP Management Exporter",
        description="Prometheus exporter for Akka cluster membership",
        version=VERSION,
    )

    # Sync handlers run in the threadpool; concurrent scrapes are serialized by the exporter lock.
    def metrics() -> Response:
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    def index() -> HTMLResponse:
        return HTMLResponse(LANDING_PAGE.format(path=telemetry_path))

    app.add_api_route(telemetry_path, metrics, methods=["GET"], include_in_schema=False)
    if telemetry_path != "/":
        app.add_api_route("/", index, methods=["GET"], include_in_schema=False)
    return app
