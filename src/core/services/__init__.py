"""Servicios del Core: casos de uso y canal de login."""
