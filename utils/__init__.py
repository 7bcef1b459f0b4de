"""Shared configuration, logging and exception helpers."""
