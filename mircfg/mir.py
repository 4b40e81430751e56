# mircfg/mir.py
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

BasicBlockIndex = int

@dataclass(frozen=True)
class DefId:
    crate_hash: int
    def_idx: int

    def __str__(self):
        return f"DefId({self.crate_hash}, {self.def_idx})"

@dataclass(frozen=True)
class Statement:
    raw: Any    # opaque, never interpreted

    def __str__(self):
        return repr(self.raw)

# ---------- Call operands ----------
@dataclass(frozen=True)
class FnOperand:
    def_id: DefId

@dataclass(frozen=True)
class UnknownOperand:
    pass

CallOperand = Union[FnOperand, UnknownOperand]

# ---------- Terminators ----------
@dataclass(frozen=True)
class Goto:
    target_bb: BasicBlockIndex

@dataclass(frozen=True)
class SwitchInt:
    target_bbs: List[BasicBlockIndex]

@dataclass(frozen=True)
class Resume:
    pass

@dataclass(frozen=True)
class Abort:
    pass

@dataclass(frozen=True)
class Return:
    pass

@dataclass(frozen=True)
class Unreachable:
    pass

@dataclass(frozen=True)
class Drop:
    target_bb: BasicBlockIndex
    unwind_bb: Optional[BasicBlockIndex] = None

@dataclass(frozen=True)
class DropAndReplace:
    target_bb: BasicBlockIndex
    unwind_bb: Optional[BasicBlockIndex] = None

@dataclass(frozen=True)
class Call:
    operand: CallOperand
    cleanup_bb: Optional[BasicBlockIndex] = None
    ret_bb: Optional[BasicBlockIndex] = None

@dataclass(frozen=True)
class Assert:
    target_bb: BasicBlockIndex
    cleanup_bb: Optional[BasicBlockIndex] = None

@dataclass(frozen=True)
class Yield:
    resume_bb: BasicBlockIndex
    drop_bb: Optional[BasicBlockIndex] = None

@dataclass(frozen=True)
class GeneratorDrop:
    pass

@dataclass(frozen=True)
class FalseEdges:
    real_target_bb: BasicBlockIndex

@dataclass(frozen=True)
class FalseUnwind:
    real_target_bb: BasicBlockIndex

Terminator = Union[Goto, SwitchInt, Resume, Abort, Return, Unreachable, Drop,
                   DropAndReplace, Call, Assert, Yield, GeneratorDrop,
                   FalseEdges, FalseUnwind]

# ---------- Bodies ----------
@dataclass
class BasicBlock:
    term: Terminator
    stmts: List[Statement] = field(default_factory=list)

@dataclass
class Mir:
    def_id: DefId
    blocks: List[BasicBlock]   # position is the block index; 0 is the entry

@dataclass
class MirPack:
    mir: Mir

Pack = MirPack
