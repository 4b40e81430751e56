# mircfg/edges.py
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .mir import (Abort, Assert, BasicBlockIndex, Call, DefId, Drop,
                  DropAndReplace, FalseEdges, FalseUnwind, FnOperand,
                  GeneratorDrop, Goto, Resume, Return, SwitchInt, Terminator,
                  Unreachable, Yield)

UNKNOWN_CALLEE = "???"

# pseudo node kind -> extra attributes (None keeps the graph default)
SINK_STYLE: Dict[str, Optional[Dict[str, str]]] = {
    "resume":      {"shape": "point", "color": "blue"},
    "abort":       {"shape": "point", "color": "red"},
    "ret":         {"shape": "point"},
    "unreachable": None,
    "gen drop":    None,
}
CALL_STYLE = {"fillcolor": "lightblue1", "style": "filled"}

@dataclass(frozen=True)
class Edge:
    src: str
    dst: str
    label: Optional[str] = None

@dataclass(frozen=True)
class PseudoNode:
    name: str
    attrs: Optional[Dict[str, str]] = None

@dataclass
class TermEdges:
    label: str
    edges: List[Edge] = field(default_factory=list)
    pseudo_nodes: List[PseudoNode] = field(default_factory=list)

class ExternalNodes:
    """Hands out unique names for pseudo nodes within one rendering pass.

    Names look like ``prefix(n)`` where ``n`` counts previous requests for
    the same prefix, starting at 0.
    """
    def __init__(self):
        self.counts: Dict[str, int] = defaultdict(int)

    def label(self, prefix: str) -> str:
        n = self.counts[prefix]
        self.counts[prefix] = n + 1
        return f"{prefix}({n})"

def def_id_node_prefix(d: DefId) -> str:
    return f"{d.crate_hash}-{d.def_idx}"

def map_terminator(src_bb: BasicBlockIndex, term: Terminator, nodes: ExternalNodes) -> TermEdges:
    src = str(src_bb)

    def to(dst, label=None):
        return Edge(src, str(dst), label)

    def with_secondary(label, target_bb, other_bb, other_label):
        out = TermEdges(label, [to(target_bb)])
        if other_bb is not None:
            out.edges.append(to(other_bb, other_label))
        return out

    def sink(kind):
        name = nodes.label(kind)
        return TermEdges(kind, [to(name)], [PseudoNode(name, SINK_STYLE[kind])])

    if isinstance(term, Goto):
        return TermEdges("goto", [to(term.target_bb)])
    if isinstance(term, FalseEdges):
        return TermEdges("false edge", [to(term.real_target_bb)])
    if isinstance(term, FalseUnwind):
        return TermEdges("false unwind", [to(term.real_target_bb)])
    if isinstance(term, SwitchInt):
        # duplicates are kept, each target gets its own edge
        return TermEdges("switch_int", [to(t) for t in term.target_bbs])
    if isinstance(term, Resume):
        return sink("resume")
    if isinstance(term, Abort):
        return sink("abort")
    if isinstance(term, Return):
        return sink("ret")
    if isinstance(term, Unreachable):
        return sink("unreachable")
    if isinstance(term, GeneratorDrop):
        return sink("gen drop")
    if isinstance(term, Drop):
        return with_secondary("drop", term.target_bb, term.unwind_bb, "unwind")
    if isinstance(term, DropAndReplace):
        return with_secondary("drop+replace", term.target_bb, term.unwind_bb, "unwind")
    if isinstance(term, Assert):
        return with_secondary("assert", term.target_bb, term.cleanup_bb, "unwind")
    if isinstance(term, Yield):
        return with_secondary("yield", term.resume_bb, term.drop_bb, "drop")
    if isinstance(term, Call):
        if isinstance(term.operand, FnOperand):
            callee = nodes.label(def_id_node_prefix(term.operand.def_id))
        else:
            callee = nodes.label(UNKNOWN_CALLEE)
        out = TermEdges("call", [to(callee)], [PseudoNode(callee, dict(CALL_STYLE))])
        if term.cleanup_bb is not None:
            out.edges.append(to(term.cleanup_bb, "cleanup"))
        if term.ret_bb is not None:
            # the return edge leaves the callee, not the calling block
            out.edges.append(Edge(callee, str(term.ret_bb)))
        return out
    raise TypeError(f"Unknown terminator {term!r}")
