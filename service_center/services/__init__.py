"""
Service layer: business logic shared by the routers.
"""
