"""HTTP routers for the BuildAura API.

- functions: the four generation function endpoints
- generations: reload a generated entity by id
- ideas / plans / launch_assets / tasks: per-user record collections
- prompt_history: audit trail of generation calls
- dashboard, health
"""
