"""
SprintSpace Backend — Middleware Package
==========================================

Middleware Chain (request order):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit: reject abusive clients before any processing
    2. Request ID: correlation id for logs, error bodies and X-Request-ID
    3. Logging: method, path, status and duration with the request id
    4. CORS: preflight handling and credentialed cross-origin cookies
"""
