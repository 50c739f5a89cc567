from typing import Optional

from pydantic import BaseModel

from .base import BaseEntity, InstallationId


class GitOpsRef(BaseModel):
    """Binding of a cluster to a GitHub App installation and repository."""

    installation_id: InstallationId
    owner: str
    repo: str
    branch: Optional[str] = None
    path: Optional[str] = None


class Cluster(BaseEntity):
    title: str
    # Repository the cluster was connected to before GitOps refs existed
    github_owner: Optional[str] = None
    github_repo: Optional[str] = None
    git_ops_ref: Optional[GitOpsRef] = None
