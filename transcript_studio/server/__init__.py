"""HTTP API server package.

WHY: The host UI and the streaming producer talk to the engine over HTTP.
This package holds the FastAPI app, the in-memory session store, and the
Pydantic request/response models.
"""
