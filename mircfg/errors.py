from typing import Optional

class MirCfgError(Exception):
    pass

class SectionError(MirCfgError):
    pass

class DecodeError(MirCfgError):
    pass

class RenderError(MirCfgError):
    def __init__(self, msg: str, status: Optional[int] = None):
        super().__init__(msg)
        self.status = status
