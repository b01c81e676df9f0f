"""
Step receipts and run reports — the outcome contract of every run.

Each bootstrap or install step returns a StepReceipt. Fatal failures
raise instead (see ``geminit.core.errors``); receipts only carry
``ok`` and ``skipped`` outcomes plus recoverable warnings.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class StepReceipt(BaseModel):
    """Result of a single step."""

    step: str
    status: Literal["ok", "skipped"] = "ok"
    message: str = ""
    path: str | None = None
    at: str = Field(default_factory=_now_iso)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def done(cls, step: str, message: str = "", **kwargs: Any) -> StepReceipt:
        """Create a receipt for a step that changed something."""
        return cls(step=step, status="ok", message=message, **kwargs)

    @classmethod
    def skip(cls, step: str, reason: str = "", **kwargs: Any) -> StepReceipt:
        """Create a receipt for a step whose artifact already existed."""
        return cls(step=step, status="skipped", message=reason, **kwargs)


class RunReport(BaseModel):
    """Ordered receipts plus recoverable warnings for one run."""

    receipts: list[StepReceipt] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    started_at: str = Field(default_factory=_now_iso)

    def add(self, receipt: StepReceipt) -> StepReceipt:
        self.receipts.append(receipt)
        return receipt

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def get(self, step: str) -> StepReceipt | None:
        """Look up a receipt by step name."""
        for receipt in self.receipts:
            if receipt.step == step:
                return receipt
        return None

    @property
    def created(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.skipped)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "ok": True,
            "started_at": self.started_at,
            "steps": [
                {
                    "step": r.step,
                    "status": r.status,
                    "message": r.message,
                    "path": r.path,
                    **({"metadata": r.metadata} if r.metadata else {}),
                }
                for r in self.receipts
            ],
            "warnings": list(self.warnings),
            "summary": {"done": self.created, "skipped": self.skipped},
        }


class BootstrapReport(RunReport):
    """Report of a workspace bootstrap."""

    target_dir: str = ""
    environment_python: str | None = None

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["target_dir"] = self.target_dir
        result["environment_python"] = self.environment_python
        return result


class RuntimeReport(RunReport):
    """Report of a runtime install."""

    detected_version: str = "0.0.0"
    required_version: str = ""
    upgraded: bool = False
    tool_version: str | None = None

    def to_dict(self) -> dict:
        result = super().to_dict()
        result.update({
            "detected_version": self.detected_version,
            "required_version": self.required_version,
            "upgraded": self.upgraded,
            "tool_version": self.tool_version,
        })
        return result
