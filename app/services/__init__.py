"""
Services layer - Business logic goes here.
Keep services focused on one concern each (resources, requests, travel times).

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Services never format HTTP responses; routes map their errors to status codes
- External lookups (distance matrix, geocoding) degrade instead of failing the caller
"""
