# mircfg/decoder.py
"""Lazy reader for the MIR pack stream.

Each record is one MessagePack value laid out the way serde's compact
MessagePack encoder writes Rust types:

* a struct is an array of its fields in declaration order,
* an enum is ``[variant_index, [fields...]]``,
* an ``Option`` is ``nil`` or the bare value.
"""
import logging
from typing import Any, Iterator, List, Optional

import msgpack

from .errors import DecodeError
from .mir import (Abort, Assert, BasicBlock, Call, DefId, Drop, DropAndReplace,
                  FalseEdges, FalseUnwind, FnOperand, GeneratorDrop, Goto, Mir,
                  MirPack, Pack, Resume, Return, Statement, SwitchInt,
                  Terminator, UnknownOperand, Unreachable, Yield)

log = logging.getLogger(__name__)

# variant index -> (type, field kinds); "bb" is a block index, "bb?" an optional one
TERMINATORS = [
    (Goto,           ["bb"]),
    (SwitchInt,      ["bbs"]),
    (Resume,         []),
    (Abort,          []),
    (Return,         []),
    (Unreachable,    []),
    (Drop,           ["bb", "bb?"]),
    (DropAndReplace, ["bb", "bb?"]),
    (Call,           ["operand", "bb?", "bb?"]),
    (Assert,         ["bb", "bb?"]),
    (Yield,          ["bb", "bb?"]),
    (GeneratorDrop,  []),
    (FalseEdges,     ["bb"]),
    (FalseUnwind,    ["bb"]),
]

def _array(v: Any, what: str, n: Optional[int] = None) -> list:
    if not isinstance(v, (list, tuple)):
        raise DecodeError(f"Expected array for {what}, got {type(v).__name__}")
    if n is not None and len(v) != n:
        raise DecodeError(f"Expected {n} fields for {what}, got {len(v)}")
    return list(v)

def _uint(v: Any, what: str) -> int:
    if isinstance(v, bool) or not isinstance(v, int) or v < 0:
        raise DecodeError(f"Expected unsigned integer for {what}, got {v!r}")
    return v

def _variant(v: Any, what: str, count: int):
    tag, fields = _array(v, what, 2)
    tag = _uint(tag, f"{what} tag")
    if tag >= count:
        raise DecodeError(f"Unknown {what} variant {tag}")
    return tag, _array(fields, f"{what} fields")

def decode_def_id(v: Any) -> DefId:
    crate_hash, def_idx = _array(v, "DefId", 2)
    return DefId(_uint(crate_hash, "crate_hash"), _uint(def_idx, "def_idx"))

def decode_operand(v: Any):
    tag, fields = _variant(v, "CallOperand", 2)
    if tag == 0:
        return FnOperand(decode_def_id(_array(fields, "Fn", 1)[0]))
    _array(fields, "Unknown", 0)
    return UnknownOperand()

def _field(kind: str, v: Any):
    if kind == "bb":
        return _uint(v, "block index")
    if kind == "bb?":
        return None if v is None else _uint(v, "block index")
    if kind == "bbs":
        return [_uint(x, "block index") for x in _array(v, "block list")]
    if kind == "operand":
        return decode_operand(v)
    raise AssertionError(kind)

def decode_terminator(v: Any) -> Terminator:
    tag, fields = _variant(v, "Terminator", len(TERMINATORS))
    cls, kinds = TERMINATORS[tag]
    _array(fields, cls.__name__, len(kinds))
    return cls(*[_field(k, f) for k, f in zip(kinds, fields)])

def decode_block(v: Any) -> BasicBlock:
    stmts, term = _array(v, "BasicBlock", 2)
    return BasicBlock(term=decode_terminator(term),
                      stmts=[Statement(s) for s in _array(stmts, "statements")])

def decode_mir(v: Any) -> Mir:
    def_id, blocks = _array(v, "Mir", 2)
    return Mir(decode_def_id(def_id), [decode_block(b) for b in _array(blocks, "blocks")])

def decode_pack(v: Any) -> Pack:
    tag, fields = _variant(v, "Pack", 1)
    return MirPack(decode_mir(_array(fields, "Pack::Mir", 1)[0]))

class Decoder:
    """Iterates over the packs in ``data``, one at a time.

    Iteration stops cleanly at the end of the stream. Anything else
    (truncation, bad MessagePack, a value of the wrong shape) raises
    ``DecodeError`` and the iterator is done.
    """
    def __init__(self, data: bytes):
        self.data = data
        self.unpacker = msgpack.Unpacker(raw=False, strict_map_key=False)
        self.unpacker.feed(data)
        self.index = 0

    def __iter__(self) -> Iterator[Pack]:
        return self

    def __next__(self) -> Pack:
        if self.unpacker is None:
            raise StopIteration
        start = self.unpacker.tell()
        try:
            value = self.unpacker.unpack()
        except msgpack.OutOfData:
            # tell() already counts the bytes of a partial record
            self.unpacker = None
            if start != len(self.data):
                raise DecodeError(f"Truncated record {self.index} at offset {start}")
            raise StopIteration
        except (ValueError, TypeError, msgpack.UnpackException) as e:
            # TypeError: a map or array used as a map key is unhashable
            self.unpacker = None
            raise DecodeError(f"Malformed record {self.index}: {e}") from e
        try:
            pack = decode_pack(value)
        except DecodeError as e:
            self.unpacker = None
            raise DecodeError(f"Record {self.index}: {e}") from e
        log.debug("decoded record %d", self.index)
        self.index += 1
        return pack

def decode_all(data: bytes) -> List[Pack]:
    return list(Decoder(data))
