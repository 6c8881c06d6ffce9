"""
beatroot core package.

Multi-agent beat tracking over onset events:
- Tempo induction and agent-based tracking (`beatroot.tracking`)
- Onset events from precomputed novelty curves (`beatroot.onsets`)
- A batch pipeline over novelty .npy files (`beatroot.pipeline`)
- A minimal Typer-based CLI (`beatroot.cli`)

Configuration:
- Shared filesystem anchors live in `beatroot.global_config`.
- Tracking parameters live in `beatroot.tracking.config`.
"""
