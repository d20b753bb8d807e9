"""
Project-type detection for Project Context Scanner.

Probes the scan root for build manifests and returns the exclusion rules
implied by each detected ecosystem.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from pcs.core.models import ExclusionRule, RuleSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectType:
    """
    An ecosystem recognized by marker files at the project root.

    Attributes:
        name: Ecosystem name
        markers: File names whose presence at the root identifies the ecosystem
        excludes: Rules injected when the ecosystem is detected
    """

    name: str
    markers: tuple[str, ...]
    excludes: tuple[str, ...]


PROJECT_TYPES: tuple[ProjectType, ...] = (
    ProjectType(name="go", markers=("go.mod", "go.sum"), excludes=("vendor/",)),
    ProjectType(
        name="java",
        markers=("pom.xml", "build.gradle", "build.gradle.kts"),
        excludes=("target/",),
    ),
)


def detect_project_types(
    root: Path, project_types: tuple[ProjectType, ...] = PROJECT_TYPES
) -> list[ProjectType]:
    """
    Detect ecosystems by probing for marker files at the root.

    Args:
        root: Project root directory
        project_types: Candidate ecosystems

    Returns:
        Detected project types, in candidate order
    """
    detected = []
    for project_type in project_types:
        if any((root / marker).is_file() for marker in project_type.markers):
            logger.debug(f"Detected {project_type.name} project at {root}")
            detected.append(project_type)
    return detected


def project_exclusion_rules(root: Path) -> list[ExclusionRule]:
    """
    Build the always-on rules implied by the project types found at the root.

    Args:
        root: Project root directory

    Returns:
        Rules with RuleSource.PROJECT, without duplicates
    """
    rules: list[ExclusionRule] = []
    for project_type in detect_project_types(root):
        for pattern in project_type.excludes:
            rule = ExclusionRule(pattern, RuleSource.PROJECT)
            if rule not in rules:
                rules.append(rule)
    return rules
