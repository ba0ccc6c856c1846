# Core type aliases for secdc's data model.
# Source programs are read into plain Python values: int for numbers, Symbol for
# identifiers and list for parenthesised forms. No explicit Cons type is defined.
#
# Naming guidance:
# - SExpression: a syntactic form as produced by the reader and consumed by the compiler.
# - Operand: one operand of an unlinked instruction (literal text or a symbolic reference).

from typing import Any

# Forms alias (int | Symbol | list of forms)
SExpression = Any
# Instruction operand alias (str | FunctionRef | BranchRef)
Operand = Any

__version__ = "0.3.0"
