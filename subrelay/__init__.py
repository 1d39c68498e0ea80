"""SUBRELAY - SubAgent delegation configuration for AI coding CLIs.

This package installs, records and removes SubAgent deployments: the
shared manifest, the vendor bridging control scripts and the routing
instructions injected into host assistant configuration files.
"""

__version__ = "1.0.0"
MANIFEST_VERSION = "1.0"

__all__ = [
    "__version__",
    "MANIFEST_VERSION",
]
