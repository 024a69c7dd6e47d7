"""Build orchestration module.

This module handles:
- The ordered release pipeline and its step table
- Running external builders and tools
- Chart sanitizing
- Provenance outputs (source bundle, manifest snapshot, license report)
"""

from release_builder.builds.orchestrator import Orchestrator, StepFailure, build

__all__ = ["Orchestrator", "StepFailure", "build"]
