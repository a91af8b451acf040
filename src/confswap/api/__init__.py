"""FastAPI application for the confidential swap UI."""
