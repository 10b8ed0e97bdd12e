"""
Mock upstream alerting API used for local runs and integration tests.
"""

import copy
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from shared.logging import get_logger

METRICS_SAMPLE_WINDOW = 200
MAX_LIST_LIMIT = 200
DEFAULT_LIST_LIMIT = 50


def _event(event_id: str, event_type: str, principal: str, target: str, hint: str,
           labels: Optional[List[str]], description: str, ts: datetime) -> Dict[str, Any]:
    return {
        "id": event_id,
        "event_type": event_type,
        "principal": principal,
        "target": target,
        "network": "10.0.4.0/24",
        "severity_hint": hint,
        "labels": labels,
        "description": description,
        "ts": ts.isoformat().replace("+00:00", "Z"),
    }


def default_alerts(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """A small, deterministic alert set covering every lifecycle state."""
    now = now or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    rows = [
        ("abc-123", "iam_policy_change", "svc-deployer", "prod-admin-role", "high",
         ["iam", "privilege"], "Admin policy attached to service account", "high", 0.93,
         ["admin", "policy", "attach"], "awaiting_approval"),
        ("def-456", "login_anomaly", "alice", "console", "medium",
         ["auth"], "Login from unfamiliar ASN", "medium", 0.71, ["asn", "new"], "pending"),
        ("ghi-789", "bucket_public", "bob", "reports-bucket", "high",
         None, "Bucket ACL made public", "high", 0.88, None, "action_executed"),
        ("jkl-012", "port_scan", "unknown", "edge-lb", "low",
         ["network"], "Low-rate scan against edge", "low", 0.42, ["scan"], "reviewed"),
    ]
    alerts = []
    for offset, (alert_id, etype, principal, target, hint, labels, desc,
                 severity, confidence, reasons, status) in enumerate(rows):
        created = now - timedelta(minutes=offset * 5)
        alerts.append({
            "alert_id": alert_id,
            "event": _event(f"evt-{alert_id}", etype, principal, target, hint, labels, desc, created),
            "triage": {"severity": severity, "confidence": confidence, "reason_tokens": reasons},
            "status": status,
            "created": created.isoformat().replace("+00:00", "Z"),
        })
    return alerts


class MockAlertsApiServer:
    """Mock alerting API server implementation."""

    def __init__(self, api_key: str = "test-api-key", alerts: Optional[List[Dict[str, Any]]] = None,
                 credential_header: str = "X-API-Key"):
        self.api_key = api_key
        self.credential_header = credential_header
        self.logger = get_logger("mock.alerts_api")
        self.app = FastAPI(title="Mock Alerts API", version="1.0.0")
        self.alerts: Dict[str, Dict[str, Any]] = {
            alert["alert_id"]: copy.deepcopy(alert)
            for alert in (alerts if alerts is not None else default_alerts())
        }
        self.approvals: List[str] = []
        self.requests: List[Dict[str, Any]] = []

        self._setup_middleware()
        self._setup_routes()

    def _newest(self, limit: int) -> List[Dict[str, Any]]:
        ordered = sorted(self.alerts.values(), key=lambda a: a["created"], reverse=True)
        return ordered[:limit]

    def _setup_middleware(self):
        """Record every call and enforce the API key."""

        @self.app.middleware("http")
        async def check_api_key(request: Request, call_next):
            self.requests.append({
                "method": request.method,
                "path": request.url.path,
                "query": request.url.query,
                "headers": dict(request.headers),
                "body": await request.body(),
            })
            if request.url.path == "/healthz":
                return await call_next(request)
            key = request.headers.get(self.credential_header)
            if not key or key != self.api_key:
                return PlainTextResponse("unauthorized", status_code=401)
            return await call_next(request)

    def _setup_routes(self):
        """Set up mock alerting API routes."""

        @self.app.get("/healthz")
        async def health():
            return {
                "service": "mock-alerts-api",
                "status": "ok",
                "time": datetime.now(timezone.utc).isoformat(),
            }

        @self.app.get("/alerts")
        async def list_alerts(request: Request):
            limit = DEFAULT_LIST_LIMIT
            raw = request.query_params.get("limit")
            if raw:
                try:
                    candidate = int(raw)
                except ValueError:
                    candidate = 0
                if 0 < candidate <= MAX_LIST_LIMIT:
                    limit = candidate
            alerts = self._newest(limit)
            # an empty result is encoded as null, as the real upstream does
            return JSONResponse({"alerts": alerts or None})

        @self.app.get("/alerts/{alert_id}")
        async def get_alert(alert_id: str):
            alert = self.alerts.get(alert_id)
            if alert is None:
                return PlainTextResponse("not found", status_code=404)
            return JSONResponse(alert)

        @self.app.post("/alerts/{alert_id}/approve")
        async def approve(alert_id: str):
            alert = self.alerts.get(alert_id)
            if alert is None:
                return PlainTextResponse("not found", status_code=404)
            if alert["status"] != "awaiting_approval":
                return PlainTextResponse("alert not awaiting approval", status_code=409)
            alert["status"] = "action_executed"
            self.approvals.append(alert_id)
            self.logger.info("Mock approval recorded", alert_id=alert_id)
            return JSONResponse({"ok": True, "alert_id": alert_id})

        @self.app.get("/metrics")
        async def metrics():
            counts = {"Low": 0, "Med": 0, "High": 0, "Awaiting": 0, "Executed": 0, "Pending": 0}
            severity_keys = {"low": "Low", "medium": "Med", "high": "High"}
            status_keys = {"awaiting_approval": "Awaiting", "action_executed": "Executed", "pending": "Pending"}
            for alert in self._newest(METRICS_SAMPLE_WINDOW):
                severity = severity_keys.get(alert["triage"]["severity"])
                if severity:
                    counts[severity] += 1
                status = status_keys.get(alert["status"])
                if status:
                    counts[status] += 1
            return JSONResponse({"sample_window": METRICS_SAMPLE_WINDOW, "counts": counts})


def create_app(api_key: Optional[str] = None):
    """Create mock alerting API application."""
    server = MockAlertsApiServer(api_key=api_key or os.getenv("API_KEY", "test-api-key"))
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=int(os.getenv("PORT", "8083")))
