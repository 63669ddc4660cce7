"""Modelos y entidades del dominio.

Por qué:
- Aquí viven los tipos de petición/respuesta (Pydantic v2), el mapeo CRUD y
  el estado de autenticación.
- El dominio no conoce httpx ni la CLI: solo conceptos del problema.
"""
