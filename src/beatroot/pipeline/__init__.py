"""Pipeline orchestration layer.

Pipeline modules are organized by verb:
- `pipeline/beats.py` - novelty curves -> onset events -> beat times

Import policy:
- CLI imports only from `pipeline.*` for orchestration (verbs).
- `pipeline.*` may call `tracking.*` and `onsets.*`.
- `tracking.*` and `onsets.*` must not call `pipeline.*`.
"""
