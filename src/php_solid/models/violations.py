# --- Violation value objects --------------------------------------------------
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LspViolation:
    """A method that breaks the contract of an interface or parent class."""
    class_name: str
    method_name: str
    contract_name: str  # interface or parent class whose contract is broken
    reason: str
    details: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.class_name}::{self.method_name}() violates {self.contract_name}: {self.reason}"
        if self.details:
            text += f"\n          {self.details}"
        return text

    def to_dict(self) -> dict:
        return {
            "principle": "LSP",
            "className": self.class_name,
            "methodName": self.method_name,
            "contractName": self.contract_name,
            "reason": self.reason,
            "details": self.details,
        }


@dataclass(frozen=True)
class IspViolation:
    """A class/interface pair that suggests the interface is too wide."""
    class_name: str
    interface_name: str
    reason: str
    details: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.class_name} -> {self.interface_name}: {self.reason}"
        if self.details:
            text += f"\n          {self.details}"
        return text

    def to_dict(self) -> dict:
        return {
            "principle": "ISP",
            "className": self.class_name,
            "interfaceName": self.interface_name,
            "reason": self.reason,
            "details": self.details,
        }
