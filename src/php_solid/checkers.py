"""
LSP and ISP orchestrators.

Both resolve a class's contracts through the static index and hand every
(class, contract) pair to their list of rules. Rules are plain objects with
a ``check`` method; the orchestrators know nothing about what they test.
"""
from typing import Sequence

from php_solid.errors import ClassNotFoundError
from php_solid.indexer import PhpIndexer
from php_solid.logging import get_logger
from php_solid.logging_tags import ISP, LSP
from php_solid.models.ast_models import ClassDescriptor
from php_solid.models.violations import IspViolation, LspViolation
from php_solid.resolver import TypeResolver
from php_solid.rules.base import IspRule, LspRule

logger = get_logger(__name__)


def _load(indexer: PhpIndexer, class_name: str) -> ClassDescriptor:
    descriptor = indexer.get_class(class_name)
    if descriptor is None:
        raise ClassNotFoundError(class_name, "not found in any indexed file")
    return descriptor


class LspChecker:
    """
    Checks a class against all its contracts: every interface it implements
    (directly or inherited) and its immediate parent class.
    """

    def __init__(self, resolver: TypeResolver, rules: Sequence[LspRule]):
        self.resolver = resolver
        self.rules = list(rules)

    def contracts(self, cls: ClassDescriptor) -> list[ClassDescriptor]:
        contracts = list(self.resolver.interfaces_of(cls))
        parent_name = self.resolver.parent_of(cls)
        parent = self.resolver.indexer.get_class(parent_name) if parent_name else None
        if parent is not None:
            contracts.append(parent)
        return contracts

    def check(self, class_name: str) -> list[LspViolation]:
        """
        Returns the LSP violations of ``class_name`` (empty if none).
        Raises ClassNotFoundError if the class is not indexed.
        """
        cls = _load(self.resolver.indexer, class_name)
        own_methods = self.resolver.own_methods(cls)
        violations: list[LspViolation] = []

        for contract in self.contracts(cls):
            for contract_method in self.resolver.methods_of(contract):
                # Only methods the class defines itself; inherited ones cannot deviate.
                method = own_methods.get(contract_method.name.lower())
                if method is None or method.owner.lower() == contract_method.owner.lower():
                    continue
                for rule in self.rules:
                    violations.extend(rule.check(method, contract_method, cls, contract))

        logger.debug(f"{LSP} {cls.name}: {len(violations)} violation(s)")
        return violations


class IspChecker:
    """Runs every ISP rule for every interface a class implements."""

    def __init__(self, resolver: TypeResolver, rules: Sequence[IspRule]):
        self.resolver = resolver
        self.rules = list(rules)

    def check(self, class_name: str) -> list[IspViolation]:
        """
        Returns the ISP violations of ``class_name`` (empty if none).
        Raises ClassNotFoundError if the class is not indexed.
        """
        cls = _load(self.resolver.indexer, class_name)
        violations: list[IspViolation] = []
        for interface in self.resolver.interfaces_of(cls):
            for rule in self.rules:
                violations.extend(rule.check(cls, interface))

        logger.debug(f"{ISP} {cls.name}: {len(violations)} violation(s)")
        return violations
