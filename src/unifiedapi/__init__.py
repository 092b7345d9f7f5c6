"""Unified API: RSVP gate, visitor logging and to-do backend."""
