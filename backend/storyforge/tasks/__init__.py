"""Background jobs run after the response through FastAPI ``BackgroundTasks``.

Each job:
1. Reads what it needs from the DB in a short-lived session
2. Releases the connection
3. Calls the image provider or builds the export file
4. Opens a new session to write the result or the failed status

Jobs are fire-and-forget: they never raise to the caller.
"""
