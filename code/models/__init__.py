# models/__init__.py
"""Modèles de données: messages, buffers, nœuds et ensemble des nœuds."""
