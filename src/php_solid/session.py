"""
The analysis session: one object owning every cache of a run.

    session = AnalysisSession(isp_threshold=5)
    session.index_file("src/Service.php")
    session.check_lsp("App\\Service")

The parsed-file cache, class registry, resolver caches, throws traces and the
fat-interface "already reported" set all live here, so two sessions never
share state.
"""
from typing import Optional, Sequence

from php_solid.checkers import IspChecker, LspChecker
from php_solid.indexer import PhpIndexer
from php_solid.models.ast_models import ClassDescriptor
from php_solid.models.violations import IspViolation, LspViolation
from php_solid.resolver import TypeResolver
from php_solid.rules.base import IspRule, LspRule
from php_solid.rules.isp import EmptyMethodRule, FatInterfaceRule, IncompleteImplementationRule
from php_solid.rules.lsp import (
    ParameterTypeContravarianceRule,
    ReturnTypeCovarianceRule,
    ThrowsContractRule,
)
from php_solid.throws.detector import ThrowsDetector


class AnalysisSession:
    def __init__(
        self,
        isp_threshold: int = FatInterfaceRule.DEFAULT_THRESHOLD,
        indexer: Optional[PhpIndexer] = None,
        lsp_rules: Optional[Sequence[LspRule]] = None,
        isp_rules: Optional[Sequence[IspRule]] = None,
    ):
        self.indexer = indexer or PhpIndexer()
        self.resolver = TypeResolver(self.indexer)
        self.detector = ThrowsDetector(self.resolver)

        if lsp_rules is None:
            lsp_rules = [
                ThrowsContractRule(self.detector),
                ReturnTypeCovarianceRule(self.resolver),
                ParameterTypeContravarianceRule(self.resolver),
            ]
        if isp_rules is None:
            isp_rules = [
                EmptyMethodRule(self.resolver),
                FatInterfaceRule(self.resolver, isp_threshold),
                IncompleteImplementationRule(self.resolver),
            ]
        self.lsp = LspChecker(self.resolver, lsp_rules)
        self.isp = IspChecker(self.resolver, isp_rules)

    def index_file(self, path: str) -> list[ClassDescriptor]:
        return self.indexer.index_file(path)

    def index_source(self, source: str, path: str) -> list[ClassDescriptor]:
        return list(self.indexer.index_source(source, path).classes)

    def check_lsp(self, class_name: str) -> list[LspViolation]:
        return self.lsp.check(class_name)

    def check_isp(self, class_name: str) -> list[IspViolation]:
        return self.isp.check(class_name)
