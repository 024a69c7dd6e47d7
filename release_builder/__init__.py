"""Release Builder - build orchestration for release artifacts.

This package turns a declarative manifest into container images, chart
bundles, OS packages, archives, and the provenance files that accompany
every release.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
