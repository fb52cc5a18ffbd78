"""Detection errors surfaced to callers."""

from __future__ import annotations


class InputError(ValueError):
    """The caller supplied a malformed buffer, image or option set."""


class DetectionError(RuntimeError):
    """One or more transforms failed while running a detection call."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        detail = "; ".join(f"{tid}: {msg}" for tid, msg in sorted(self.errors.items()))
        super().__init__(f"Detection failed in {len(self.errors)} transform(s): {detail}")
