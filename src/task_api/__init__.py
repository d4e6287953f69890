"""
Task Tracker server package.

The FastAPI application lives in `task_api.main:app`; it is not imported here
so that clients can use the shared request/response schemas without starting
the server's logging and storage.
"""
