"""Release manifest module.

This module provides:
- The immutable Manifest model
- Loading manifests from YAML/JSON
- Deterministic YAML snapshots of the effective manifest
"""

from release_builder.manifest.schema import Manifest, UnknownRepositoryError

__all__ = ["Manifest", "UnknownRepositoryError"]
