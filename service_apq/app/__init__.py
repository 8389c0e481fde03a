"""
Automatic Persisted Query service package for the APQ Access Layer.

The service fronts a GraphQL origin:
- Resolution: persisted query hash -> query text via the store, or
  registration of the client's first full submission
- Integrity: constant-time sha256 check before anything is registered
- Forwarding: the resolved request is POSTed to the origin
- Headers: Cache-Control and diagnostic headers for the response

Structure:
- app.main: FastAPI app, the /graphql route and service wiring.
- app.parsing: Query-string envelope validation.
- app.integrity: Hash verification.
- app.store: Persisted query store contract and backends.
- app.resolution: Lookup / verify / register state machine.
- app.adapters: HTTP client for the GraphQL origin.
- app.headers: Header tables and response header synthesis.
- app.tasks: Tracked background tasks for registrations.
"""
