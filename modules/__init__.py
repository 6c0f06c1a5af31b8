"""
Application Modules.

- backend/: API, services, file storage, preview rendering and task queue
"""
