"""costseg_server — FastAPI REST API for the cost segregation dialogue SDK.

Exposes the ChatService as an HTTP API with session management,
step-by-step interaction, allocation reports, and reference data endpoints.
"""
