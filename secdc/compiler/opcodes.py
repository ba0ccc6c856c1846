from __future__ import annotations

from enum import Enum


class Opcode(str, Enum):
    # Loads
    LDC = "LDC"  # constant
    LD = "LD"  # depth index
    LDF = "LDF"  # function address

    # Calls / control flow
    AP = "AP"  # argc
    RTN = "RTN"
    SEL = "SEL"  # true-branch false-branch
    JOIN = "JOIN"

    # Arithmetic
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"

    # Comparison
    CEQ = "CEQ"
    CGT = "CGT"
    CGTE = "CGTE"

    # Lists
    CONS = "CONS"
    CAR = "CAR"
    CDR = "CDR"

    def __str__(self) -> str:
        return self.value
