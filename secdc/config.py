from __future__ import annotations
import os
from dataclasses import dataclass

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def flag_from_env(var: str, default: bool) -> bool:
    raw = os.environ.get(var)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return default


@dataclass
class CompilerOptions:
    # Structurally identical conditional arms share one branch
    share_branches: bool = False
    # Keep comment lines in rendered listings
    comments: bool = True
    # Prefix rendered instructions with their absolute address
    addresses: bool = False

    @classmethod
    def from_env(cls) -> CompilerOptions:
        return cls(
            share_branches=flag_from_env("SECDC_SHARE_BRANCHES", False),
            comments=flag_from_env("SECDC_COMMENTS", True),
            addresses=bool(os.environ.get("SECDC_DISASM")),
        )
