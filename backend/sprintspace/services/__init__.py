"""
SprintSpace Backend — Services Layer
======================================

Service Inventory:
    - AuthGuard: token issuing, transport and verification
    - EventService: listing, lookup, running events, owner-only writes
    - RegistrationService: CRUD and derived counter maintenance

Services receive an AsyncSession per call and hold no per-request state.
"""
