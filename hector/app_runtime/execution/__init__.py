"""Execution pipeline for the app runtime.

This package contains the core execution components:

- **variables**: ``@name.ext`` reference extraction and prompt substitution
- **bag**: Execution bag (artifact filename -> BagEntry)
- **dependencies**: Playability check and static reference ordering check
- **executor**: Per-action-type handlers (generation service / file store)
- **orchestrator**: Run state machine (single action, run all, halt on failure)
"""
