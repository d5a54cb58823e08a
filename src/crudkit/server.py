"""
Mount controllers on a FastAPI app.

Each controller gets a collection route at `path` and an item route at
`path/{id}`. Routes accept every CRUD verb so the controller, not the
router, decides between dispatch and 400.
"""

from __future__ import annotations

import logging
from typing import Mapping

from fastapi import FastAPI

from crudkit.controller import Controller

logger = logging.getLogger(__name__)

API_PREFIX = "/api"
ROUTE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def mount_controller(app: FastAPI, path: str, controller: Controller, item_param: str = "id") -> None:
    path = "/" + path.strip("/")
    app.add_route(path, controller.handle_collection(), methods=ROUTE_METHODS)
    app.add_route(f"{path}/{{{item_param}}}", controller.handle_item(), methods=ROUTE_METHODS)
    logger.info("Mounted %s at %s and %s/{%s}", type(controller).__name__, path, path, item_param)


def create_app(
    controllers: Mapping[str, Controller],
    prefix: str = API_PREFIX,
    title: str = "crudkit",
) -> FastAPI:
    """
    Args:
        controllers: resource path (e.g. "/things") -> controller
        prefix: mounted in front of every resource path
    """
    app = FastAPI(title=title)
    base = prefix.rstrip("/")
    for path, controller in controllers.items():
        mount_controller(app, base + "/" + path.strip("/"), controller)
    return app
