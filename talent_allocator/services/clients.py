from __future__ import annotations

from ..backends import CLIENTS
from .base import EntityService


class ClientService(EntityService):
    collection_name = CLIENTS
    entity_type = "client"
    required = ("name",)
