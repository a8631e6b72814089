"""
SprintSpace Backend — API Routes Package
==========================================

Route Inventory:
    - health.py:         GET  /                   (liveness string)
                         GET  /health             (database probe)
    - auth.py:           POST /jwt, /login, /logout
    - events.py:         /events, /marathons, /running-events
    - registrations.py:  /registrations, /registrations/search

Routes are thin: extract request data, call a service, return its result.
Errors are raised as SprintSpaceError subclasses and formatted by the
handlers registered in main.py.
"""
