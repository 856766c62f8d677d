"""Pydantic Schemas — request/response models for the API boundary."""
