"""API HTTP de TenantDesk (FastAPI)."""
