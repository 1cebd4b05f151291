# simulation/__init__.py
"""Moteur de simulation, mobilité, statistiques et tracés."""
