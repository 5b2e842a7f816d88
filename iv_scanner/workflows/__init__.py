from __future__ import annotations

from typing import Any

__all__ = ["IVBarWorkflow", "sample_iv_bars"]


def __getattr__(name: str) -> Any:
	if name in {"IVBarWorkflow", "sample_iv_bars"}:
		from .iv_bar_workflow import IVBarWorkflow, sample_iv_bars

		return {"IVBarWorkflow": IVBarWorkflow, "sample_iv_bars": sample_iv_bars}[name]
	raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
