import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from backup_metrics_server.prometheus.PrometheusMetrics import PrometheusMetrics
from backup_metrics_server.recorder import BackupRecorder
from backup_metrics_shared.models_v1 import BackupReportPayloadV1

logger = logging.getLogger(__name__)

# Der Report-Handler nimmt alles ausser GET /healthz entgegen, unabhängig von Pfad und Methode
REPORT_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(prometheus_metrics: PrometheusMetrics) -> FastAPI:
    """Erzeugt die FastAPI-App des Reporting-Listeners.

    Die App schreibt in die übergebene Registry; es gibt keinen globalen Zustand.
    """
    app = FastAPI(title="etcd Backup Metrics Reporting API")
    app.state.prometheus_metrics = prometheus_metrics
    app.state.recorder = BackupRecorder(prometheus_metrics)

    @app.middleware("http")
    async def timing_middleware(request: Request, call_next):
        """Middleware: loggt Methode, Pfad, Status und Dauer jedes Requests."""
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        logger.debug("%s %s -> %d took %.3f seconds",
                     request.method, request.url.path, response.status_code, elapsed)
        return response

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz():
        return "OK"

    @app.api_route("/{path:path}", methods=REPORT_METHODS, response_class=PlainTextResponse)
    async def report(request: Request):
        body = await request.body()

        try:
            payload = BackupReportPayloadV1.model_validate_json(body)
        except ValidationError as e:
            logger.warning("Failed to decode backup report: %s", e)
            return PlainTextResponse("Bad request", status_code=400)

        request.app.state.recorder.record(payload.cluster, payload.measurements())
        return "OK"

    return app
