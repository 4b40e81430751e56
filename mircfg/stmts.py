# mircfg/stmts.py
import re
from .mir import BasicBlock, Statement

# characters that split or nest fields inside a record label
RECORD_SPECIAL = re.compile(r"([\\{}|<>])")

def format_statement(stmt: Statement) -> str:
    return RECORD_SPECIAL.sub(r"\\\1", str(stmt))

def statements_text(blk: BasicBlock) -> str:
    return "\\n".join(format_statement(s) for s in blk.stmts)
