from typing import List, Optional

from fastapi.routing import APIRouter


class ControllerBase:
    def __init__(self, prefix: Optional[str] = None, tags: Optional[List[str]] = None):
        class_name = self.__class__.__name__.removesuffix("Controller")
        prefix = f"/{class_name}" if prefix is None else "/" + prefix.strip("/")
        tags = [class_name] if tags is None else [*tags, class_name]

        self.router = APIRouter(prefix=prefix, tags=tags)
