"""Release bounded context.

- semver / model: value types (Version, ReleaseTag, BranchRef, outcomes)
- oracle: latest released version from tag history
- chooser: operator choice of the next version
- engine: ordered validation and release pipeline
"""

from __future__ import annotations
