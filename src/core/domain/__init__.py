"""Modelos y entidades del dominio.

- Aquí viven las estructuras de datos puras y estrictas (Pydantic v2).
- El dominio no conoce HTTP, CLI, ni subprocess: solo releases, versiones y canales.
"""
