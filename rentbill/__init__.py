"""Rent billing: renters, monthly bills, and the client-side bill cache."""
