"""Interfaces/abstracciones del Core.

- Define contratos (Protocol) que implementan adaptadores concretos.
- El orquestador depende de estas abstracciones, no de httpx ni subprocess.
"""
