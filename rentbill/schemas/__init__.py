"""Pydantic schemas shared by the HTTP API and the bill record stores."""
