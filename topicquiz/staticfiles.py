from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles
from starlette.types import Scope


def is_hidden(path: str) -> bool:
    parts = path.replace("\\", "/").split("/")
    return any(p.startswith(".") and p not in (".", "..") for p in parts)


class PublicStaticFiles(StaticFiles):
    """StaticFiles that never serves dotfiles or anything under a dot-directory (e.g. `.env`, `.git/`)."""

    async def get_response(self, path: str, scope: Scope):
        if is_hidden(path):
            raise HTTPException(status_code=404)
        return await super().get_response(path, scope)
