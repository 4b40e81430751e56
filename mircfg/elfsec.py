# mircfg/elfsec.py
import logging
from pathlib import Path

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from .errors import SectionError

log = logging.getLogger(__name__)

SECTION_NAME = ".yk_mir_cfg"

def read_section(path: Path, name: str = SECTION_NAME) -> bytes:
    try:
        with open(path, "rb") as fh:
            sec = ELFFile(fh).get_section_by_name(name)
            if sec is None:
                raise SectionError(f"{path}: no {name} section")
            data = sec.data()
    except OSError as e:
        raise SectionError(f"{path}: {e.strerror or e}") from e
    except ELFError as e:
        raise SectionError(f"{path}: not a readable ELF file ({e})") from e
    log.debug("%s: %s is %d bytes", path, name, len(data))
    return data
