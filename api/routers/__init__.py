"""
API Routers - endpoint handlers for the TeamUp API.

- requests: create join requests, approve/deny them, list them per project
"""
