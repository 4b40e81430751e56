# mircfg/viz_cfg.py
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import graphviz
from graphviz import Digraph

from .edges import ExternalNodes, map_terminator
from .errors import RenderError
from .mir import DefId, Mir, Pack
from .stmts import statements_text

log = logging.getLogger(__name__)

ENTRY = "__entry"
IMAGE_FORMAT = "png"
BLOCK_STYLE = {"shape": "record", "style": "filled", "fillcolor": "beige"}

@dataclass
class RenderedMir:
    def_id: DefId
    dot_path: Path
    image_path: Optional[Path] = None

def mir_graphviz(mir: Mir) -> Digraph:
    g = Digraph("g", node_attr={"shape": "box"})
    g.node(ENTRY, "", shape="point")
    g.edge(ENTRY, "0")
    nodes = ExternalNodes()   # pseudo node names restart for every function
    for idx, blk in enumerate(mir.blocks):
        te = map_terminator(idx, blk.term, nodes)
        for p in te.pseudo_nodes:
            g.node(p.name, p.name, **(p.attrs or {}))
        for e in te.edges:
            g.edge(e.src, e.dst, label=e.label)
        g.node(str(idx), f"{{{idx} | {statements_text(blk)} | {te.label}}}", **BLOCK_STYLE)
    return g

def output_stem(def_id: DefId) -> str:
    return f"mir-{def_id.crate_hash}-{def_id.def_idx}"

def run_dot(dot_path: Path, image_path: Path):
    try:
        graphviz.render("dot", IMAGE_FORMAT, dot_path, outfile=image_path)
    except graphviz.ExecutableNotFound as e:
        raise RenderError(f"dot is not installed or not on PATH: {e}") from e
    except graphviz.CalledProcessError as e:
        raise RenderError(f"dot failed on {dot_path} with exit status {e.returncode}", e.returncode) from e

def render_mir(mir: Mir, out_dir: Path, render: bool = True) -> RenderedMir:
    g = mir_graphviz(mir)
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    stem = output_stem(mir.def_id)
    out = RenderedMir(mir.def_id, out_dir / f"{stem}.dot.txt")
    # the source file is complete and closed before dot ever reads it
    g.save(out.dot_path)
    log.debug("wrote %s", out.dot_path)
    if render:
        out.image_path = out_dir / f"{stem}.{IMAGE_FORMAT}"
        run_dot(out.dot_path, out.image_path)
        log.debug("rendered %s", out.image_path)
    return out

def render_packs(packs: Iterable[Pack], out_dir: Path, render: bool = True) -> List[RenderedMir]:
    done = []
    for pack in packs:
        log.info("%s", pack.mir.def_id)
        done.append(render_mir(pack.mir, out_dir, render))
    return done
