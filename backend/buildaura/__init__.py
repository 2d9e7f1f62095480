"""
BuildAura Backend Application Package

This package contains the FastAPI backend and the guided-flow client core
for the BuildAura startup toolkit, including:

- main.py: FastAPI application wiring
- generation_service.py: LLM-backed idea, plan, toolkit and task generation
- wizard/: multi-step wizard controller, flow definitions, results presenter
- client/: HTTP gateway used by the wizard to reach the function endpoints
"""

__version__ = "1.0.0"
