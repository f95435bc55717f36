"""Git branch cleanup by glob patterns.

Features:
- Delete local and/or remote branches matching glob patterns
- Whitelist patterns that protect branches from deletion
- Preview and dry-run modes
- Global and per-project JSON configuration
- Force option for unmerged local branches
"""

__version__ = "1.0.0"
