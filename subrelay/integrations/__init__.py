"""External integrations for SUBRELAY.

This package contains:
- git: Repository root discovery
- host: Workspace resolution and terminal launching
"""

from subrelay.integrations.git import find_repo_root
from subrelay.integrations.host import HostIntegration, TerminalHost

__all__ = [
    "find_repo_root",
    "HostIntegration",
    "TerminalHost",
]
