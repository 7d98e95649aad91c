# --- Rule protocols -----------------------------------------------------------
from typing import Protocol

from php_solid.models.ast_models import ClassDescriptor, MethodDescriptor
from php_solid.models.violations import IspViolation, LspViolation


class LspRule(Protocol):
    """One aspect of the Liskov contract between an implementation and its contract."""

    def check(
        self,
        method: MethodDescriptor,
        contract_method: MethodDescriptor,
        cls: ClassDescriptor,
        contract: ClassDescriptor,
    ) -> list[LspViolation]:
        """
        Compares ``method`` (defined by ``cls``) against ``contract_method``
        (visible on ``contract``). Returns an empty list when compatible.
        """
        ...


class IspRule(Protocol):
    """One interface-segregation heuristic, run once per (class, interface) pair."""

    def check(self, cls: ClassDescriptor, interface: ClassDescriptor) -> list[IspViolation]:
        ...
