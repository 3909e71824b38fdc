"""Shared fixtures: a small two-system architecture document."""

import copy

import pytest

from c4view.ir.architecture import ArchitectureDocument

SAMPLE_DOCUMENT = {
    "metadata": {"name": "Shop", "version": "1.0", "generated": "2026-01-15"},
    "architecture": {
        "persons": [{"id": "User", "label": "Customer"}],
        "systems": [
            {
                "id": "Sys1",
                "label": "Shop",
                "containers": [
                    {
                        "id": "API",
                        "technology": "Go",
                        "components": [{"id": "Auth"}, {"id": "Orders"}],
                    },
                    {"id": "Web", "label": "Web App"},
                ],
                "datastores": [{"id": "DB"}],
                "relations": [
                    {"from": "API", "to": "DB", "verb": "reads"},
                    {"from": "Web", "to": "API", "label": "calls"},
                ],
            },
            {
                "id": "Sys2",
                "label": "Payments",
                "containers": [{"id": "Gateway"}],
            },
        ],
        "relations": [
            {"from": "User", "to": "Sys1.Web", "label": "uses"},
            {"from": "Sys1.API.Orders", "to": "Sys2.Gateway", "label": "charges"},
        ],
    },
    "navigation": {"levels": ["context", "container", "component"]},
}

SAMPLE_NODE_IDS = {
    "User",
    "Sys1",
    "Sys1.API",
    "Sys1.API.Auth",
    "Sys1.API.Orders",
    "Sys1.Web",
    "Sys1.DB",
    "Sys2",
    "Sys2.Gateway",
}


@pytest.fixture()
def sample_dict():
    return copy.deepcopy(SAMPLE_DOCUMENT)


@pytest.fixture()
def sample_document(sample_dict):
    return ArchitectureDocument.model_validate(sample_dict)


@pytest.fixture()
def sample_body(sample_document):
    return sample_document.architecture
