"""Shared configuration, logging, metrics and health endpoints for recovery hosts."""
