"""
Console Gateway Service package for SentinelFlow.

The gateway sits between the browser-facing console and the internal
alerting/triage API:
- Forwarding: any sub-resource under the mount goes to the one upstream
- Credential injection: the API key is attached server-side only
- Relay: upstream status, body and content-type come back unchanged

Structure:
- app.main: FastAPI app, routes, and lifecycle wiring.
- app.adapters: HTTP client for the upstream API.
- app.domain: URL reconstruction and response relay.
"""
