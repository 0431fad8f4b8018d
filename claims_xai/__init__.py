"""Interpretable machine learning for claims-frequency models.

Subpackages: ``data``, ``preprocessing``, ``evaluation``, ``modeling``,
``explain`` and ``plotting``. Analysis scripts live in ``analyses/`` and are
not imported from here.
"""

__version__ = "0.1.0"
