import argparse, logging, sys, pathlib
from .decoder import Decoder
from .elfsec import read_section
from .errors import MirCfgError
from .viz_cfg import render_packs

log = logging.getLogger(__name__)

OUT_DIR = pathlib.Path("mirs")

def process(path: pathlib.Path, out_dir: pathlib.Path = OUT_DIR):
    data = read_section(path)
    return render_packs(Decoder(data), out_dir)

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(prog='mircfg', description='Render the MIR control-flow graphs embedded in a compiled binary')
    ap.add_argument('binary', type=pathlib.Path, help='object or executable carrying a .yk_mir_cfg section')
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    try:
        done = process(args.binary)
    except MirCfgError as e:
        log.error("%s", e)
        return 1
    log.info("rendered %d functions into %s", len(done), OUT_DIR)
    return 0

if __name__ == '__main__':
    sys.exit(main())
