"""
lazycloud - Terminal control plane for cloud provider resources.

Architecture:
- core/: Interaction framework (phase controller, service instances,
  capability roles, command dispatch)
- views/: Generic elements and app-level views (selectors, dialogs, status)
- providers/: Concrete provider services registered at startup
- app.py: Textual host that feeds events into the controller

Extensibility points:
1. New services: Implement ServiceLogic, register a ServiceProvider in
   providers/__init__.py
2. New elements: Add to views/widgets.py, return Handled outputs
3. New contexts: Declare them in config.toml or extend contexts.py
"""

__version__ = "0.3.0"
