"""repo-onboarder - onboarding documentation for git repositories.

Clones a repository, analyzes its commit history and churn hotspots, builds
a single repository context payload and generates a fixed set of onboarding
documents from it with a language model:

- Deterministic first: analysis and payload are pure functions of the repository
- One context per repository: the payload is cached once and reused by every document
- Fail loudly: fatal errors abort the run, degraded modes are logged
"""

__version__ = "0.1.0"
