"""Default grid nodes for a fresh deployment.

Only nodes whose ``node_id`` is not stored yet are inserted, so running the
seed on every startup is harmless.
"""
from __future__ import annotations

import logging
from datetime import datetime

from models import GridNode, NodeStatus, NodeType
from services.repository import GridRepository

logger = logging.getLogger("gridos.seed")

DEFAULT_NODES = (
    {
        "node_id": "GRID-NODE-001",
        "name": "Oslo Central Substation",
        "location": "Oslo, Norway",
        "node_type": NodeType.Substation,
        "capacity": 150.5,
        "status": NodeStatus.Online,
        "installation_date": datetime(2020, 1, 15),
    },
    {
        "node_id": "GRID-NODE-002",
        "name": "Bergen Power Distribution",
        "location": "Bergen, Norway",
        "node_type": NodeType.Distribution,
        "capacity": 85.0,
        "status": NodeStatus.Online,
        "installation_date": datetime(2019, 6, 20),
    },
)


async def seed_default_nodes(repository: GridRepository) -> list[GridNode]:
    """Create the missing default nodes and return the ones created."""
    existing = {node.node_id for node in await repository.list_nodes()}
    created: list[GridNode] = []
    for fields in DEFAULT_NODES:
        if fields["node_id"] in existing:
            continue
        created.append(await repository.create_node(GridNode(**fields)))

    if created:
        logger.info("Seeded default grid nodes: %s", ", ".join(n.node_id for n in created))
    return created
