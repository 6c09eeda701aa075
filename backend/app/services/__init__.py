# Services package init
"""
Survey Backend — Services Layer
================================

What:  Business logic between routes (HTTP) and the persistence gateway.

Service Inventory:
    - SurveyService: submit, list, statistics, delete one / delete all
    - AdminService:  registration behind the shared token, login

Why services are separate from routes:
    1. Testability: services run against a mocked gateway, no HTTP needed
    2. Ordering rules (which check wins) are written once, next to each other
"""
