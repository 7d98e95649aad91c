# --- Run result -----------------------------------------------------------------
from dataclasses import dataclass, field


@dataclass
class RunResult:
    """Structured outcome of one Application run."""
    classes: list = field(default_factory=list)  # every class name that was checked
    violations: list = field(default_factory=list)  # violation dicts (LspViolation/IspViolation.to_dict())
    errors: list = field(default_factory=list)  # {"class": ..., "message": ...} or {"file": ..., "message": ...}
    failed_class_names: list = field(default_factory=list)  # may repeat across principles

    @property
    def failed_count(self) -> int:
        return len(set(self.failed_class_names))

    @property
    def passed_count(self) -> int:
        return len(self.classes) - self.failed_count

    @property
    def total_violations(self) -> int:
        return len(self.violations)

    def to_json_report(self) -> dict:
        return {
            "violations": self.violations,
            "errors": self.errors,
        }
