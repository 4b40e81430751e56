import msgpack
import pytest

from mircfg.decoder import Decoder, decode_all, decode_terminator
from mircfg.errors import DecodeError
from mircfg.mir import (Call, DefId, Drop, FnOperand, Goto, Return, Statement,
                        SwitchInt, UnknownOperand, Yield)


def _mir(crate_hash: int, def_idx: int, blocks) -> list:
    return [0, [[[crate_hash, def_idx], blocks]]]


def _block(term, stmts=()) -> list:
    return [list(stmts), term]


GOTO_1 = [0, [1]]
RETURN = [4, []]


def _pack(*values) -> bytes:
    return b"".join(msgpack.packb(v) for v in values)


def test_decodes_function_body() -> None:
    data = _pack(_mir(11, 2, [_block(GOTO_1, ["StorageLive(_1)"]), _block(RETURN)]))

    (pack,) = decode_all(data)

    assert pack.mir.def_id == DefId(11, 2)
    assert [b.term for b in pack.mir.blocks] == [Goto(1), Return()]
    assert pack.mir.blocks[0].stmts == [Statement("StorageLive(_1)")]
    assert pack.mir.blocks[1].stmts == []


def test_empty_section_has_no_records() -> None:
    assert decode_all(b"") == []


@pytest.mark.parametrize(
    "raw, expected",
    [
        ([1, [[2, 2, 3]]], SwitchInt([2, 2, 3])),
        ([6, [3, None]], Drop(3, None)),
        ([10, [3, 4]], Yield(3, 4)),
        ([8, [[0, [[5, 6]]], 4, 5]], Call(FnOperand(DefId(5, 6)), 4, 5)),
        ([8, [[1, []], None, None]], Call(UnknownOperand(), None, None)),
    ],
)
def test_terminator_variants(raw, expected) -> None:
    assert decode_terminator(raw) == expected


def test_big_crate_hash_survives() -> None:
    data = _pack(_mir(2**64 - 1, 0, [_block(RETURN)]))
    (pack,) = decode_all(data)
    assert pack.mir.def_id.crate_hash == 2**64 - 1


@pytest.mark.parametrize(
    "raw",
    [
        [99, []],          # unknown variant
        [0, []],           # Goto without its target
        [0, [-1]],         # negative block index
        [0, ["1"]],        # wrong field type
        "Return",          # not an enum at all
    ],
)
def test_malformed_terminator(raw) -> None:
    with pytest.raises(DecodeError):
        decode_terminator(raw)


def test_truncated_stream_raises() -> None:
    data = _pack(_mir(1, 0, [_block(RETURN)]), _mir(1, 1, [_block(RETURN)]))
    packs = Decoder(data[:-2])

    assert next(packs).mir.def_id == DefId(1, 0)
    with pytest.raises(DecodeError, match="Truncated"):
        next(packs)


def test_decoder_stops_after_failure() -> None:
    data = _pack(_mir(1, 0, [_block(RETURN)]), [3, []], _mir(1, 2, [_block(RETURN)]))
    packs = Decoder(data)

    next(packs)
    with pytest.raises(DecodeError, match="Record 1"):
        next(packs)
    assert list(packs) == []


def test_decoder_is_not_restartable() -> None:
    packs = Decoder(_pack(_mir(1, 0, [_block(RETURN)])))
    assert len(list(packs)) == 1
    assert list(packs) == []


def test_unhashable_map_key_is_a_decode_error() -> None:
    # {{1: 2}: 3} is valid MessagePack that Python cannot build as a dict
    record = _pack(_mir(1, 0, [_block(RETURN, ["STMT"])]))
    record = record.replace(msgpack.packb("STMT"), b"\x81\x81\x01\x02\x03")

    with pytest.raises(DecodeError, match="Malformed record 0"):
        decode_all(record)


def test_truncated_first_record_raises() -> None:
    data = _pack(_mir(1, 0, [_block(RETURN)]))
    with pytest.raises(DecodeError, match="Truncated record 0 at offset 0"):
        decode_all(data[:-1])
