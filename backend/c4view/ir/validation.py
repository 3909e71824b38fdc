from dataclasses import dataclass, field
from typing import List
from .errors import BuildIssue


@dataclass
class BuildReport:
    """
    Recovered problems met while building a graph.
    None of these stop a build; they are returned so callers can show them.
    """
    issues: List[BuildIssue] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.issues

    def add(self, level: str, message: str, object_id: str):
        self.issues.append(BuildIssue(level=level, message=message, object_id=object_id))

    def of_level(self, level: str) -> List[BuildIssue]:
        return [issue for issue in self.issues if issue.level == level]
