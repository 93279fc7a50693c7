"""Pydantic request/response schemas for the HTTP API."""

from dishes_api.schemas.base import APIRequest, APIResponse


__all__ = ["APIRequest", "APIResponse"]
