"""
LSP rules: exception contracts and signature variance.
"""
from php_solid.logging import get_logger
from php_solid.logging_tags import LSP
from php_solid.models.ast_models import ClassDescriptor, MethodDescriptor
from php_solid.models.violations import LspViolation
from php_solid.resolver import TypeResolver
from php_solid.throws.detector import ThrowsDetector

logger = get_logger(__name__)


def _format_chain(chain: tuple) -> str:
    return " -> ".join(f"{step}()" for step in chain)


def binds_signature(contract_method: MethodDescriptor, contract: ClassDescriptor) -> bool:
    """
    Whether PHP holds an override to the contract method's signature. Private
    methods bind nothing, and constructors bind only when declared by an
    interface or as abstract.
    """
    if contract_method.visibility == "private":
        return False
    if contract_method.name.lower() == "__construct":
        return contract.is_interface or contract_method.is_abstract
    return True


class ThrowsContractRule:
    """
    Every exception an implementation declares (docblock) or actually throws
    (AST) must be the same as, or a subclass of, an exception the contract
    declares. A contract without ``@throws`` permits nothing.
    """

    def __init__(self, detector: ThrowsDetector):
        self.detector = detector
        self.resolver = detector.resolver

    def check(self, method: MethodDescriptor, contract_method: MethodDescriptor,
              cls: ClassDescriptor, contract: ClassDescriptor) -> list[LspViolation]:
        allowed = self.detector.declared_throws(contract_method)
        declared = self.detector.declared_throws(method)
        actual = self.detector.trace(method, cls)

        violations = []
        for exception in declared:
            if self._allowed(exception, allowed):
                continue
            violations.append(LspViolation(
                class_name=cls.name,
                method_name=method.name,
                contract_name=contract.name,
                reason=f"@throws {exception} declared in docblock but not allowed by the contract",
            ))

        for exception, chains in actual.items():
            if self._allowed(exception, allowed):
                continue
            indirect = [c for c in chains if len(c) > 1]
            details = None
            if indirect:
                details = "Call chain: " + "; ".join(_format_chain(c) for c in indirect)
            violations.append(LspViolation(
                class_name=cls.name,
                method_name=method.name,
                contract_name=contract.name,
                reason=f"throws {exception} in code (detected via AST) but not allowed by the contract",
                details=details,
            ))

        if violations:
            logger.debug(f"{LSP} {cls.name}::{method.name}: {len(violations)} throws violation(s)")
        return violations

    def _allowed(self, exception: str, allowed: list[str]) -> bool:
        # Names are canonical already; resolve() passes them through unchanged.
        return bool(allowed) and self.resolver.is_subtype(f"\\{exception}", [f"\\{a}" for a in allowed])


class ReturnTypeCovarianceRule:
    """
    The implementation may narrow the return type, never widen it. A missing
    return type on either side is accepted.
    """

    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver

    def check(self, method: MethodDescriptor, contract_method: MethodDescriptor,
              cls: ClassDescriptor, contract: ClassDescriptor) -> list[LspViolation]:
        if not binds_signature(contract_method, contract):
            return []
        if method.return_type is None or contract_method.return_type is None:
            return []

        contract_owner = self.resolver.indexer.get_class(contract_method.owner) or contract
        if self.resolver.is_type_subtype(method.return_type, contract_method.return_type,
                                         cls.scope, contract_owner.scope):
            return []
        return [LspViolation(
            class_name=cls.name,
            method_name=method.name,
            contract_name=contract.name,
            reason=(
                f"Return type {method.return_type} is not covariant with the contract "
                f"return type {contract_method.return_type}"
            ),
        )]


class ParameterTypeContravarianceRule:
    """
    For each positional parameter both signatures share, the implementation
    must accept at least what the contract accepts. Missing types are accepted.
    """

    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver

    def check(self, method: MethodDescriptor, contract_method: MethodDescriptor,
              cls: ClassDescriptor, contract: ClassDescriptor) -> list[LspViolation]:
        if not binds_signature(contract_method, contract):
            return []
        contract_owner = self.resolver.indexer.get_class(contract_method.owner) or contract
        violations = []
        for position, (param, contract_param) in enumerate(
            zip(method.parameters, contract_method.parameters), start=1
        ):
            if param.type is None or contract_param.type is None:
                continue
            if self.resolver.is_type_subtype(contract_param.type, param.type,
                                             contract_owner.scope, cls.scope):
                continue
            violations.append(LspViolation(
                class_name=cls.name,
                method_name=method.name,
                contract_name=contract.name,
                reason=(
                    f"Parameter #{position} (${param.name}) type {param.type} is narrower "
                    f"than the contract parameter type {contract_param.type}"
                ),
            ))
        return violations
