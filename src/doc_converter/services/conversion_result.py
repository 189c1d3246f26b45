from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from doc_converter.errors import ConversionError


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one input file to PDF."""
    success: bool
    output_path: Optional[str] = None
    error: Optional[ConversionError] = None

    @classmethod
    def ok(cls, output_path: str) -> "ConversionResult":
        return cls(success=True, output_path=output_path)

    @classmethod
    def failed(cls, error: ConversionError) -> "ConversionResult":
        return cls(success=False, error=error)

    def raise_for_error(self) -> None:
        if not self.success and self.error is not None:
            raise self.error
