# API routers package
from . import build_plan, ideas, pipeline, web

__all__ = ["build_plan", "ideas", "pipeline", "web"]
